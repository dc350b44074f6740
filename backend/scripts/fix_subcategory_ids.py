import argparse
import asyncio

from sqlalchemy import select, update

from storefront.db.session import AsyncSessionLocal
from storefront.models.product import Product
from storefront.services.catalog.maintenance import SubcategoryFixReport, plan_subcategory_fixes


async def run_fix(*, batch_size: int, apply: bool) -> SubcategoryFixReport:
    total = SubcategoryFixReport()
    offset = 0
    async with AsyncSessionLocal() as db:
        while True:
            stmt = (
                select(Product.id, Product.category_id, Product.subcategory_id)
                .order_by(Product.created_at.asc(), Product.id.asc())
                .offset(offset)
                .limit(batch_size)
            )
            rows = (await db.execute(stmt)).all()
            if not rows:
                break
            report = plan_subcategory_fixes((row[0], row[1], row[2]) for row in rows)
            if apply:
                for fix in report.fixes:
                    await db.execute(
                        update(Product).where(Product.id == fix.product_id).values(subcategory_id=fix.canonical)
                    )
                await db.commit()
            total.merge(report)
            offset += batch_size
            print(f"batch offset={offset} fixes={len(report.fixes)} total_fixes={len(total.fixes)}")
    return total


def main() -> None:
    parser = argparse.ArgumentParser(description="Rewrite product subcategory ids to {categorySlug}-{subcategorySlug}.")
    parser.add_argument("--batch-size", type=int, default=1000, help="Rows per batch.")
    parser.add_argument("--apply", action="store_true", help="Write changes; default is a dry run.")
    args = parser.parse_args()
    report = asyncio.run(run_fix(batch_size=max(1, int(args.batch_size)), apply=args.apply))
    print(f"updated={len(report.fixes)} already_canonical={report.already_canonical} skipped={report.skipped}")
    print(f"unresolved={len(report.unresolved)}")
    for product_id, subcategory_id in report.unresolved[:20]:
        print(f"  product={product_id} subcategory_id={subcategory_id}")
    if not args.apply:
        print("dry run: pass --apply to write changes")


if __name__ == "__main__":
    main()
