from __future__ import annotations

import argparse
import asyncio
import csv
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from pydantic import ValidationError

from app.db.session import SessionLocal
from app.promotions.schemas import PromotionDraft
from app.promotions.store import SqlPromotionStore
from app.promotions.types import PromotionSnapshot


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed promotions sharing one set of terms")
    parser.add_argument("--code", action="append", required=True, help="promo code, repeatable")
    parser.add_argument("--title", required=True)
    parser.add_argument("--description", required=True)
    parser.add_argument("--type", choices=("PERCENTAGE", "FIXED_AMOUNT"), required=True)
    parser.add_argument("--value", type=Decimal, required=True)
    parser.add_argument("--min-order-value", type=Decimal, default=Decimal("0"))
    parser.add_argument("--max-discount-amount", type=Decimal)
    parser.add_argument("--start-date", required=True, help="ISO datetime, UTC when naive")
    parser.add_argument("--end-date", help="ISO datetime; omit for open-ended")
    parser.add_argument("--usage-limit", type=int)
    parser.add_argument("--inactive", action="store_true")
    parser.add_argument("--output-csv", type=Path)
    parser.add_argument("--dry-run", action="store_true")
    return parser.parse_args(argv)


def _build_drafts(args: argparse.Namespace) -> list[PromotionDraft]:
    drafts: list[PromotionDraft] = []
    seen_codes: set[str] = set()
    for raw_code in args.code:
        try:
            draft = PromotionDraft(
                promo_code=raw_code,
                title=args.title,
                description=args.description,
                promotion_type=args.type,
                value=args.value,
                min_order_value=args.min_order_value,
                max_discount_amount=args.max_discount_amount,
                start_date=args.start_date,
                end_date=args.end_date,
                usage_limit=args.usage_limit,
                is_active=not args.inactive,
            )
        except ValidationError as exc:
            raise ValueError(f"invalid promotion '{raw_code}': {exc}") from exc
        if draft.promo_code in seen_codes:
            raise ValueError(f"promo code given twice: {draft.promo_code}")
        seen_codes.add(draft.promo_code)
        drafts.append(draft)
    return drafts


async def _insert(drafts: list[PromotionDraft]) -> list[PromotionSnapshot]:
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        store = SqlPromotionStore(session)
        return [await store.create(draft, now_utc=now_utc) for draft in drafts]


def _write_output(path: Path, drafts: list[PromotionDraft], created: list[PromotionSnapshot]) -> None:
    ids_by_code = {promotion.promo_code: promotion.id for promotion in created}
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(["promo_code", "promotion_id"])
        for draft in drafts:
            writer.writerow([draft.promo_code, ids_by_code.get(draft.promo_code, "")])


async def _run() -> int:
    args = _parse_args()
    drafts = _build_drafts(args)

    created: list[PromotionSnapshot] = []
    if not args.dry_run:
        created = await _insert(drafts)

    output_csv = args.output_csv or Path("reports/promotion_seed_output.csv")
    _write_output(output_csv, drafts, created)
    print(f"processed={len(drafts)} inserted={len(created)} output={output_csv}")  # noqa: T201
    return 0


def main() -> int:
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
