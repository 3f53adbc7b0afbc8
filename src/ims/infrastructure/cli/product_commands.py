"""CLI commands for catalog products and their variations."""

from __future__ import annotations

import click

from ims.application.add_product import AddProductHandler
from ims.application.add_variation import AddVariationHandler
from ims.domain.exceptions import DomainException
from ims.infrastructure.bootstrap import (
    inventory_service,
    product_repository,
    variation_repository,
)


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--units", default=0, type=int, help="Opening stock for a product without variations.")
@click.option("--min-order-quantity", default=1, type=int, help="Low-stock threshold for the product.")
def product_add(name: str, price: str, units: int, min_order_quantity: int) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        product = handler.handle(
            name=name, price=price, units=units, min_order_quantity=min_order_quantity
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("list")
def product_list() -> None:
    """List all products with their stock aggregates."""
    products = product_repository().list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(
        f"{'ID':<6} {'Name':<20} {'Price':>10} {'Units':>6} "
        f"{'Available':>10} {'Reserved':>9} {'Status':<13}"
    )
    click.echo("-" * 80)
    for p in products:
        click.echo(
            f"{p.id:<6} {p.name:<20} {str(p.price):>10} {p.units:>6} "
            f"{p.available_units:>10} {p.reserved_units:>9} {p.stock_status.value:<13}"
        )


@click.command("add")
@click.option("--product", "product_id", required=True, help="Parent product ID.")
@click.option("--value", "variation_value", required=True, help="Colour/size label, e.g. 'Red / M'.")
@click.option("--stock", default=0, type=int, help="Opening stock.")
def variation_add(product_id: str, variation_value: str, stock: int) -> None:
    """Add a variation to a product."""
    handler = AddVariationHandler(
        product_repo=product_repository(),
        variation_repo=variation_repository(),
        inventory=inventory_service(),
    )

    try:
        variation = handler.handle(product_id, variation_value, stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Variation {variation.id} '{variation.variation_value}' added "
        f"with {variation.stock_quantity} in stock"
    )


@click.command("list")
@click.option("--product", "product_id", default=None, help="Only this product's variations.")
def variation_list(product_id: str | None) -> None:
    """List variations and their stock."""
    repo = variation_repository()
    variations = repo.list_for_product(product_id) if product_id else repo.list_all()

    if not variations:
        click.echo("No variations found.")
        return

    click.echo(f"{'ID':<10} {'Product':<8} {'Value':<20} {'Stock':>6} {'Active':>7}")
    click.echo("-" * 55)
    for v in variations:
        click.echo(
            f"{v.id:<10} {v.product_id:<8} {v.variation_value:<20} "
            f"{v.stock_quantity:>6} {'yes' if v.is_active else 'no':>7}"
        )
