"""Sales blueprint: JSON checkout endpoints over the sale engine."""
from decimal import Decimal
from typing import Any, Dict, Optional

from flask import Blueprint, request, jsonify, current_app, Response

from partstock.database import get_session
from partstock.exceptions import BusinessLogicError
from partstock.models import Sale
from partstock.services.cart_service import Cart
from partstock.services.promotion_service import PromotionMatch
from partstock.services.sales_service import SaleCommitter
from partstock.stores.catalog_store import CatalogStore
from partstock.stores.sales_store import SalesStore

sales_bp = Blueprint('sales', __name__, url_prefix='/sales')


def _money(value) -> str:
    return f"{Decimal(value):.2f}"


def _parse_product_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BusinessLogicError(f'Invalid product_id: {value!r}')


def _parse_qty(value):
    """Digit strings from form-style clients become ints; anything else is validated by the cart."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def _build_cart(db_session, data: Any) -> Cart:
    """Build a request-scoped cart from the JSON body."""
    if not isinstance(data, dict):
        raise BusinessLogicError('Request body must be a JSON object')

    notes = data.get('notes')
    if notes is not None and not isinstance(notes, str):
        raise BusinessLogicError('notes must be a string')

    try:
        cart = Cart(
            customer_type=data.get('customer_type'),
            payment_method=data.get('payment_method'),
            notes=(notes or '').strip() or None
        )
    except ValueError as e:
        raise BusinessLogicError(str(e))

    items = data.get('items') or []
    if not isinstance(items, list):
        raise BusinessLogicError('items must be a list')

    catalog = CatalogStore(db_session)
    for entry in items:
        if not isinstance(entry, dict):
            raise BusinessLogicError('Each item needs product_id and qty')
        product = catalog.get_product(_parse_product_id(entry.get('product_id')))
        cart.add_item(product, _parse_qty(entry.get('qty', 1)))
    return cart


def _serialize_match(match: Optional[PromotionMatch]) -> Optional[Dict[str, Any]]:
    if match is None:
        return None
    return {
        'id': match.offer.promotion_id,
        'name': match.offer.name,
        'discount_percentage': str(match.offer.discount_percentage),
        'discount': _money(match.discount),
        'requirements': {str(pid): qty for pid, qty in match.requirements.items()},
    }


def _serialize_sale(sale: Sale) -> Dict[str, Any]:
    return {
        'id': sale.id,
        'sale_number': sale.sale_number,
        'datetime': sale.datetime.isoformat() if sale.datetime else None,
        'status': sale.status.value,
        'customer_type': sale.customer_type.value,
        'payment_method': sale.payment_method.value,
        'promotion_applied': sale.promotion_applied,
        'promotion_id': sale.promotion_id,
        'subtotal': _money(sale.subtotal),
        'discount': _money(sale.discount_amount),
        'total': _money(sale.total),
        'notes': sale.notes,
        'lines': [
            {
                'product_id': line.product_id,
                'qty': line.qty,
                'unit_price': _money(line.unit_price),
                'line_total': _money(line.line_total),
            }
            for line in sale.lines
        ],
    }


def _committer(db_session) -> SaleCommitter:
    return SaleCommitter(db_session, warn_low_stock=current_app.config.get('LOW_STOCK_LOG_ENABLED', True))


@sales_bp.route('/preview', methods=['POST'])
def preview() -> Response:
    """Live totals for a cart: subtotal, best promotion and total."""
    db_session = get_session()
    cart = _build_cart(db_session, request.get_json(silent=True) or {})

    match = _committer(db_session).preview(cart)
    totals = cart.totals(match)

    return jsonify({
        'customer_type': cart.customer_type.value,
        'payment_method': cart.payment_method.value,
        'lines': [
            {
                'product_id': item.product_id,
                'name': item.product.name,
                'qty': item.quantity,
                'unit_price': _money(item.unit_price),
                'line_total': _money(item.line_total),
            }
            for item in cart.items
        ],
        'subtotal': _money(totals.subtotal),
        'discount': _money(totals.discount),
        'total': _money(totals.total),
        'promotion': _serialize_match(match),
    })


@sales_bp.route('', methods=['POST'])
def confirm() -> Response:
    """Commit the cart as a sale."""
    db_session = get_session()
    data = request.get_json(silent=True) or {}
    cart = _build_cart(db_session, data)

    sale_id = _committer(db_session).commit_sale(cart)
    sale = SalesStore(db_session).get_sale(sale_id)

    current_app.logger.info(f"Sale #{sale_id} confirmed via API")
    return jsonify({'status': 'ok', 'sale_id': sale_id, 'sale': _serialize_sale(sale)}), 201


@sales_bp.route('/<int:sale_id>', methods=['GET'])
def detail_sale(sale_id: int) -> Response:
    sale = SalesStore(get_session()).get_sale(sale_id)
    return jsonify(_serialize_sale(sale))


@sales_bp.route('/<int:sale_id>/void', methods=['POST'])
def void_sale(sale_id: int) -> Response:
    """Void a sale and restore its stock."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise BusinessLogicError('Request body must be a JSON object')
    reason = data.get('reason')
    if reason is not None and not isinstance(reason, str):
        raise BusinessLogicError('reason must be a string')

    restored = _committer(get_session()).void_sale(sale_id, reason=reason)
    return jsonify({
        'status': 'ok',
        'sale_id': sale_id,
        'restored': {str(pid): qty for pid, qty in restored.items()},
    })


@sales_bp.route('/low-stock', methods=['GET'])
def low_stock() -> Response:
    products = CatalogStore(get_session()).list_low_stock()
    return jsonify([
        {
            'id': p.id,
            'name': p.name,
            'stock_qty': p.stock_qty,
            'min_stock_qty': p.min_stock_qty,
        }
        for p in products
    ])
