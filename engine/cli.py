"""
원장 엔진 CLI

실행 방법:
    python -m engine view --kind customer --account 12
    python -m engine add --kind distributor --account 5 --type payment --amount 300
    python -m engine pending list --kind customer
    python -m engine pending clear --kind customer local-...
    python -m engine aging --kind customer --json

종료 코드:
    0: 성공
    1: 입력/설정 오류
    2: 인증 실패 (세션 재설정 필요)
"""

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import AsyncIterator

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.store_api.errors import AuthenticationError
from adapters.store_api.ledger_api import (
    CustomerLedgerApi,
    DistributorLedgerApi,
    PurchaseOrderApi,
)
from adapters.store_api.rest_client import StoreApiClient
from core.config.loader import Settings, SettingsLoadError, load_settings
from core.ledger.entry import LedgerProfile, get_profile
from core.ledger.summary import check_credit_limit, compute_aging
from core.ledger.types import LedgerEntryType
from core.logging import setup_logging
from core.storage.pending_store import PendingStore
from core.types import Actor, LedgerKind
from core.utils.timezone import format_ist, parse_strict_date
from engine.models import AgingReportResponse, LedgerViewResponse
from engine.reconciler.promotion import PendingPromoter
from engine.reconciler.reconciler import LedgerReconciler, LedgerView
from engine.writer.writer import LedgerDraft, LedgerWriter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_AUTH = 2


@dataclass
class EngineContext:
    """CLI 명령 실행에 필요한 구성 요소"""

    profile: LedgerProfile
    pending_store: PendingStore
    reconciler: LedgerReconciler
    writer: LedgerWriter


@asynccontextmanager
async def open_engine(settings: Settings, kind: LedgerKind) -> AsyncIterator[EngineContext]:
    """설정으로 엔진 구성 요소 생성 및 정리

    Args:
        settings: 애플리케이션 설정
        kind: 원장 종류
    """
    profile = get_profile(kind)
    client = StoreApiClient(
        settings.api_base_url,
        token=settings.api_token,
        timeout=settings.timeout_sec,
    )

    if kind == LedgerKind.CUSTOMER:
        ledger_api = CustomerLedgerApi(client)
        purchase_orders = None
    else:
        ledger_api = DistributorLedgerApi(client)
        purchase_orders = PurchaseOrderApi(client)

    try:
        async with SQLiteAdapter(settings.db_path) as db:
            await init_schema(db)
            pending_store = PendingStore(db, kind)
            reconciler = LedgerReconciler(
                profile,
                ledger_api,
                pending_store,
                purchase_orders,
                PendingPromoter(settings.promotion_window_days),
            )
            writer = LedgerWriter(profile, ledger_api, pending_store, reconciler)
            yield EngineContext(profile, pending_store, reconciler, writer)
    finally:
        await client.close()


def _print_view(view: LedgerView) -> None:
    """view를 사람이 읽을 수 있는 표로 출력"""
    print(f"{view.summary.label}: {view.summary.value}")
    for notice in view.notices:
        print(f"  ! {notice}")
    if view.warning_count:
        print(f"  ! {view.warning_count} entries had malformed fields")

    print()
    print(f"{'date (IST)':<20} {'account':<10} {'type':<8} {'amount':>12} {'balance':>12}  origin")
    for entry in view.entries:
        date_text = format_ist(entry.occurred_at, "%Y-%m-%d %H:%M") if entry.date_valid else "-"
        print(
            f"{date_text:<20} {entry.account_id:<10} {entry.type.value:<8} "
            f"{entry.amount:>12} {entry.computed_balance!s:>12}  {entry.origin.value}"
        )


async def cmd_view(args: argparse.Namespace, settings: Settings) -> int:
    async with open_engine(settings, args.kind) as engine:
        view = await engine.reconciler.refresh(args.account)

    if view is None:
        return EXIT_OK

    if args.json:
        print(LedgerViewResponse.from_view(view).model_dump_json(indent=2))
    else:
        _print_view(view)
    return EXIT_OK


async def cmd_add(args: argparse.Namespace, settings: Settings) -> int:
    draft = LedgerDraft(
        type=args.type,
        amount=args.amount,
        transaction_date=args.date,
        reference=args.reference,
        description=args.description,
        actor=Actor.user(args.user) if args.user else None,
    )

    async with open_engine(settings, args.kind) as engine:
        if args.credit_limit is not None and draft.entry_type == LedgerEntryType.GIVEN:
            current = await engine.reconciler.refresh(args.account)
            balance = current.summary.value if current is not None else Decimal("0")
            check = check_credit_limit(balance, draft.amount, args.credit_limit)
            if not check.allowed:
                print(
                    f"Credit limit exceeded: projected {check.projected_balance} "
                    f"> limit {check.credit_limit}",
                    file=sys.stderr,
                )
                return EXIT_INVALID

        result = await engine.writer.write(args.account, draft)

    if result.degraded:
        print(f"Queued locally ({result.error}); will reconcile on next refresh")
    else:
        print(f"Recorded {result.entry.type.value} {result.entry.amount} (id {result.entry.id})")

    if result.view is not None:
        print(f"{result.view.summary.label}: {result.view.summary.value}")
    return EXIT_OK


async def cmd_pending(args: argparse.Namespace, settings: Settings) -> int:
    async with open_engine(settings, args.kind) as engine:
        if args.pending_command == "clear":
            removed = await engine.pending_store.clear_many(args.entry_ids)
            print(f"Removed {removed} pending entries")
            return EXIT_OK

        entries = await engine.pending_store.list(args.account)

    for entry in entries:
        print(
            f"{entry.id}  {entry.account_id:<10} {entry.type.value:<8} "
            f"{entry.amount:>12}  {entry.occurred_at.date().isoformat()}  {entry.reference}"
        )
    print(f"{len(entries)} pending entries")
    return EXIT_OK


async def cmd_aging(args: argparse.Namespace, settings: Settings) -> int:
    async with open_engine(settings, args.kind) as engine:
        view = await engine.reconciler.refresh(args.account)

    if view is None:
        return EXIT_OK

    report = compute_aging(view.entries, args.as_of)
    if args.json:
        print(AgingReportResponse.from_report(report).model_dump_json(indent=2))
        return EXIT_OK

    labels = list(report.totals)
    print(f"{'account':<10} " + " ".join(f"{label:>12}" for label in labels) + f" {'total':>12}")
    for row in report.rows:
        print(
            f"{row.account_id:<10} "
            + " ".join(f"{row.buckets[label]:>12}" for label in labels)
            + f" {row.total:>12}"
        )
    print(
        f"{'TOTAL':<10} "
        + " ".join(f"{report.totals[label]:>12}" for label in labels)
        + f" {report.grand_total:>12}"
    )
    return EXIT_OK


def _decimal_arg(value: str) -> Decimal:
    try:
        return Decimal(value.replace(",", ""))
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}") from e


def _date_arg(value: str) -> datetime:
    parsed = parse_strict_date(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"date must be YYYY-MM-DD: {value!r}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    """CLI 인자 파서 생성"""
    parser = argparse.ArgumentParser(
        prog="python -m engine",
        description="스토어 원장 정합 엔진",
    )
    parser.add_argument("--settings", type=Path, default=None, help="settings.yaml 경로")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="콘솔 로그 레벨 (기본: WARNING)",
    )

    kind_parent = argparse.ArgumentParser(add_help=False)
    kind_parent.add_argument(
        "--kind",
        type=LedgerKind,
        choices=list(LedgerKind),
        default=LedgerKind.CUSTOMER,
        help="원장 종류 (기본: customer)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    view = subparsers.add_parser("view", parents=[kind_parent], help="원장 조회")
    view.add_argument("--account", default=None, help="계정 ID (생략 시 전체)")
    view.add_argument("--json", action="store_true", help="JSON 출력")
    view.set_defaults(handler=cmd_view)

    add = subparsers.add_parser("add", parents=[kind_parent], help="원장 거래 등록")
    add.add_argument("--account", required=True, help="계정 ID")
    add.add_argument("--type", required=True, help="given/credit/payment")
    add.add_argument("--amount", required=True, type=_decimal_arg, help="금액")
    add.add_argument("--date", default=None, help="거래일 YYYY-MM-DD")
    add.add_argument("--reference", default="", help="참조")
    add.add_argument("--description", default="", help="설명")
    add.add_argument("--user", default=None, help="작성자 사용자 ID")
    add.add_argument(
        "--credit-limit",
        type=_decimal_arg,
        default=None,
        help="외상 한도 (초과 시 등록 거부, 0 이하는 무제한)",
    )
    add.set_defaults(handler=cmd_add)

    pending = subparsers.add_parser("pending", help="로컬 Pending 큐 관리")
    pending_sub = pending.add_subparsers(dest="pending_command", required=True)
    pending_list = pending_sub.add_parser("list", parents=[kind_parent], help="Pending 항목 조회")
    pending_list.add_argument("--account", default=None, help="계정 ID")
    pending_clear = pending_sub.add_parser("clear", parents=[kind_parent], help="Pending 항목 삭제")
    pending_clear.add_argument("entry_ids", nargs="+", help="삭제할 항목 ID")
    pending.set_defaults(handler=cmd_pending)

    aging = subparsers.add_parser("aging", parents=[kind_parent], help="외상 경과일 분석")
    aging.add_argument("--account", default=None, help="계정 ID (생략 시 전체)")
    aging.add_argument("--as-of", type=_date_arg, default=None, help="기준일 YYYY-MM-DD")
    aging.add_argument("--json", action="store_true", help="JSON 출력")
    aging.set_defaults(handler=cmd_aging)

    return parser


async def run(argv: list[str] | None = None) -> int:
    """CLI 실행

    Returns:
        종료 코드
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging("engine", console_level=getattr(logging, args.log_level))

    try:
        settings = load_settings(args.settings)
        return await args.handler(args, settings)
    except SettingsLoadError as e:
        print(f"Settings error: {e}", file=sys.stderr)
        return EXIT_INVALID
    except ValueError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_INVALID
    except AuthenticationError as e:
        logger.error("인증 실패, 토큰을 갱신하세요", extra={"error": e.message})
        print("Authentication failed (401); update api.token and retry", file=sys.stderr)
        return EXIT_AUTH


def main(argv: list[str] | None = None) -> int:
    """동기 진입점"""
    return asyncio.run(run(argv))
