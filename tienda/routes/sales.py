# ==============================================================================
# RUTAS DE VENTAS (punto de venta)
# ==============================================================================
# Todas requieren autenticación; el usuario autenticado es el vendedor.
# Los errores de negocio los traduce el manejador global de main.py.
# ==============================================================================

from flask import Blueprint, g, request

from tienda.app_container import get_container
from tienda.auth import auth_required
from tienda.services.validation import parse_json_object

bp = Blueprint('sales', __name__, url_prefix='/sales')


@bp.route('', methods=['POST'])
@auth_required
def create_sale():
    """
    Body JSON:
    {
        "items": [{"product": "remera-negra", "qty": 2, "unitPrice": 12000}],
        "paymentMethod": "cash",
        "customer": {"name": "...", "phone": "..."},
        "notes": "..."
    }
    """
    data = parse_json_object(request.get_json(silent=True))
    sale = get_container().sale_recorder.record_sale(
        items=data.get('items'),
        payment_method=data.get('paymentMethod'),
        seller=g.user,
        customer=data.get('customer'),
        notes=data.get('notes', ''),
    )
    return {"message": "Venta registrada", "sale": sale.to_dict()}, 201


@bp.route('', methods=['GET'])
@auth_required
def list_sales():
    """Filtros opcionales: ?from=YYYY-MM-DD&to=YYYY-MM-DD&paymentMethod=cash"""
    sales = get_container().report_reader.sales_between(
        request.args.get('from'),
        request.args.get('to'),
        request.args.get('paymentMethod'),
    )
    return [sale.to_dict() for sale in sales]


@bp.route('/<sale_id>', methods=['GET'])
@auth_required
def get_sale(sale_id):
    return get_container().sale_recorder.get_sale(sale_id).to_dict()


@bp.route('/<sale_id>', methods=['DELETE'])
@auth_required
def delete_sale(sale_id):
    restored = get_container().sale_recorder.delete_sale(sale_id, user=g.user)
    return {
        "message": "Venta eliminada y stock restaurado",
        "restored": [r.to_dict() for r in restored],
    }
