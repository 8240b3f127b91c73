# ==============================================================================
# RUTAS DE PEDIDOS ONLINE
# ==============================================================================
# POST /orders es público (lo usa la tienda online). El resto es para el
# panel de administración y requiere autenticación.
# ==============================================================================

from flask import Blueprint, g, request

from tienda.app_container import get_container
from tienda.auth import auth_required
from tienda.services.validation import parse_json_object

bp = Blueprint('orders', __name__, url_prefix='/orders')


@bp.route('', methods=['POST'])
def create_order():
    """
    Body JSON:
    {
        "items": [{"product": "remera-negra", "qty": 1, "talle": "M"}],
        "customer": {"name": "...", "phone": "...", "deliveryType": "shipping",
                     "address": "...", "email": "...", "zone": "..."},
        "paymentMethod": "transfer",
        "shippingCost": 1500,
        "notes": "..."
    }
    """
    data = parse_json_object(request.get_json(silent=True))
    order = get_container().order_lifecycle.create_order(
        items=data.get('items'),
        customer=data.get('customer'),
        payment_method=data.get('paymentMethod'),
        shipping_cost=data.get('shippingCost'),
        notes=data.get('notes', ''),
    )
    return {"message": "Pedido creado exitosamente", "order": order.to_dict()}, 201


@bp.route('', methods=['GET'])
@auth_required
def list_orders():
    """Filtros opcionales: ?status=pending&paymentStatus=approved"""
    orders = get_container().order_lifecycle.list_orders(
        status=request.args.get('status'),
        payment_status=request.args.get('paymentStatus'),
    )
    return [order.to_dict() for order in orders]


@bp.route('/<order_id>', methods=['GET'])
@auth_required
def get_order(order_id):
    return get_container().order_lifecycle.get_order(order_id).to_dict()


@bp.route('/<order_id>/status', methods=['PATCH'])
@auth_required
def change_status(order_id):
    data = parse_json_object(request.get_json(silent=True))
    order = get_container().order_lifecycle.change_status(
        order_id,
        data.get('status'),
        note=data.get('note', ''),
        user=g.user,
    )
    return {"message": "Estado del pedido actualizado", "order": order.to_dict()}


@bp.route('/<order_id>/payment-status', methods=['PATCH'])
@auth_required
def change_payment_status(order_id):
    data = parse_json_object(request.get_json(silent=True))
    order = get_container().order_lifecycle.update_payment_status(
        order_id,
        data.get('paymentStatus'),
        payment_details=data.get('paymentDetails'),
        user=g.user,
    )
    return {"message": "Estado de pago actualizado", "order": order.to_dict()}


@bp.route('/<order_id>', methods=['DELETE'])
@auth_required
def delete_order(order_id):
    restored = get_container().order_lifecycle.delete_order(order_id, user=g.user)
    return {"message": "Pedido eliminado", "restored": [r.to_dict() for r in restored]}
