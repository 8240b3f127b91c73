# ==============================================================================
# TIENDA - Motor transaccional de stock, ventas y pedidos
# ==============================================================================
# Paquete principal. La app Flask se crea con tienda.main.create_app().
# ==============================================================================

__version__ = '1.0.0'
