from sqlalchemy.ext.asyncio import async_sessionmaker
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Sequence
import logging

from pharmacy_pos.models import PaymentMethod
from pharmacy_pos.repositories.product_repository import ProductRepository
from pharmacy_pos.repositories.sale_repository import SaleRepository, to_item_response, to_sale_response
from pharmacy_pos.schemas.sale import SaleItemCreate, SaleResponse
from pharmacy_pos.core.exceptions import (
    EmptyCart,
    InvalidPaymentMethod,
    BelowCostPrice,
    ProductNotFound,
    InsufficientStock,
)

logger = logging.getLogger(__name__)

PAYMENT_METHODS = {method.value for method in PaymentMethod}


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class SaleTransactionEngine:
    """
    Validates and commits one sale as a single unit of work.

    The whole sale runs inside one database transaction: either the sale row,
    every line item and every stock decrement are committed together, or
    nothing is. Stock is taken with a conditional UPDATE so two concurrent
    sales of the same product can never drive it below zero.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _check_request(items: Sequence[SaleItemCreate], payment_method: str):
        if not items:
            raise EmptyCart()
        if payment_method not in PAYMENT_METHODS:
            raise InvalidPaymentMethod(payment_method)

    async def _validate(self, products: ProductRepository, items: Sequence[SaleItemCreate]):
        """Validation pass - reads only, aborts before any write"""
        requested: Dict[str, int] = {}
        for item in items:
            requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

        for item in items:
            product = await products.get_by_id(item.product_id)
            if product is None:
                raise ProductNotFound(item.product_id)

            wanted = requested[item.product_id]
            if product.stock < wanted:
                raise InsufficientStock(product.id, product.stock, wanted, name=product.name)

            if to_money(item.unit_sell_price) < to_money(product.buy_price):
                raise BelowCostPrice(product.id, item.unit_sell_price, product.buy_price)

    async def submit_sale(self, items: Sequence[SaleItemCreate], payment_method: str) -> SaleResponse:
        """
        Record a sale and take its quantities out of stock.

        Raises EmptyCart / InvalidPaymentMethod / BelowCostPrice (validation),
        ProductNotFound, or InsufficientStock - in every case after a full
        rollback.
        """
        self._check_request(items, payment_method)

        async with self.session_factory() as session:
            async with session.begin():
                products = ProductRepository(session)
                sales = SaleRepository(session)

                await self._validate(products, items)

                sale = await sales.insert(payment_method)

                total_amount = Decimal("0.00")
                total_profit = Decimal("0.00")
                line_items = []

                for item in items:
                    # Prices as of commit time, not the validation snapshot
                    product = await products.get_by_id(item.product_id, refresh=True)
                    if product is None:
                        raise ProductNotFound(item.product_id)

                    unit_sell_price = to_money(item.unit_sell_price)
                    unit_buy_price = to_money(product.buy_price)
                    if unit_sell_price < unit_buy_price:
                        raise BelowCostPrice(product.id, unit_sell_price, unit_buy_price)

                    total_sell_price = unit_sell_price * item.quantity
                    item_profit = (unit_sell_price - unit_buy_price) * item.quantity

                    sale_item = await sales.insert_item(
                        sale,
                        product_id=product.id,
                        quantity=item.quantity,
                        unit_sell_price=unit_sell_price,
                        unit_buy_price=unit_buy_price,
                        total_sell_price=total_sell_price,
                        item_profit=item_profit
                    )

                    taken = await products.decrement_stock_if_available(product.id, item.quantity)
                    if not taken:
                        current = await products.get_by_id(product.id, refresh=True)
                        available = current.stock if current is not None else 0
                        logger.warning(
                            f"Stock changed during sale {sale.id}: {product.name} "
                            f"has {available}, needed {item.quantity}"
                        )
                        raise InsufficientStock(product.id, available, item.quantity, name=product.name)

                    total_amount += total_sell_price
                    total_profit += item_profit
                    line_items.append(to_item_response(sale_item, product.name))

                await sales.update_totals(sale, total_amount, total_profit)
                receipt = to_sale_response(sale, line_items)

        logger.info(
            f"Sale {receipt.id} completed: {len(line_items)} item(s), "
            f"total {total_amount}, profit {total_profit}, paid by {payment_method}"
        )
        return receipt
