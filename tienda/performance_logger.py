# ==============================================================================
# PROFILING INTERNO
# ==============================================================================
# Mide la duración de cada request y de las funciones marcadas con
# @profile_function (transacciones). Lo lento va al logger
# "tienda.performance", que escribe en el log rotativo de la app.
# ==============================================================================

import logging
import threading
import time
from collections import defaultdict
from functools import wraps

logger = logging.getLogger('tienda.performance')

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

ENABLE_PROFILING = True

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

# Nombres legibles para los logs
ROUTE_NAMES = {
    'POST /sales': 'Registrar venta',
    'GET /sales': 'Listar ventas',
    'GET /sales/<sale_id>': 'Ver venta',
    'DELETE /sales/<sale_id>': 'Eliminar venta',
    'POST /orders': 'Crear pedido',
    'GET /orders': 'Listar pedidos',
    'GET /orders/<order_id>': 'Ver pedido',
    'PATCH /orders/<order_id>/status': 'Cambiar estado de pedido',
    'PATCH /orders/<order_id>/payment-status': 'Cambiar estado de pago',
    'DELETE /orders/<order_id>': 'Eliminar pedido',
}


# ═══════════════════════════════════════════════════════════════════════════
# ESTADÍSTICAS DE FUNCIONES (en memoria)
# ═══════════════════════════════════════════════════════════════════════════

# {nombre_funcion: {calls, total_time, max_time}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()


def _get_route_name(method, path, rule=None):
    """Nombre legible de la ruta; si no está mapeada, la ruta tal cual."""
    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]
    return ROUTE_NAMES.get(f"{method} {path}", f"{method} {path}")


def _log_slow(kind, name, time_ms, user=None):
    level = logging.ERROR if time_ms >= THRESHOLD_CRITICAL else logging.WARNING
    severity = 'MUY LENTA' if level == logging.ERROR else 'LENTA'
    logger.log(
        level, "%s %s: %s (%.0f ms, usuario: %s)",
        kind, severity, name, time_ms, user or 'anónimo'
    )


# ═══════════════════════════════════════════════════════════════════════════
# HOOKS PARA FLASK (before/after request)
# ═══════════════════════════════════════════════════════════════════════════

def init_profiling(app):
    """
    Registra hooks before_request y after_request en la app.

    Uso:
        from tienda.performance_logger import init_profiling
        init_profiling(app)
    """
    if not ENABLE_PROFILING:
        return

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request

        if not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000
        rule = str(request.url_rule) if request.url_rule else request.path
        name = _get_route_name(request.method, request.path, rule)
        user = getattr(g, 'user', None)

        logger.debug("%s %s → %d en %.0f ms", request.method, request.path,
                     response.status_code, elapsed)
        if elapsed >= THRESHOLD_WARNING:
            _log_slow('Ruta', name, elapsed, user)

        return response


# ═══════════════════════════════════════════════════════════════════════════
# DECORADOR PARA FUNCIONES CLAVE
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador para medir rendimiento de funciones críticas.

    Uso:
        @profile_function
        def mi_funcion():
            ...

        @profile_function(name="Transacción")
        def run():
            ...
    """
    def decorator(fn):
        if not ENABLE_PROFILING:
            return fn

        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms

                if elapsed_ms >= THRESHOLD_WARNING:
                    _log_slow('Función', func_name, elapsed_ms)

        return wrapper

    # Permitir uso sin paréntesis: @profile_function
    if func is not None:
        return decorator(func)
    return decorator


# ═══════════════════════════════════════════════════════════════════════════
# REPORTE DE ESTADÍSTICAS
# ═══════════════════════════════════════════════════════════════════════════

def get_function_stats():
    """
    Returns:
        dict: {nombre: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        result = {}
        for func_name, stats in _function_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[func_name] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2)
            }
        return result


def log_function_stats_report():
    """
    Escribe en el log un resumen de las funciones medidas, la más lenta
    primero. Se llama al cerrar la aplicación.
    """
    if not ENABLE_PROFILING:
        return

    stats = get_function_stats()
    if not stats:
        return

    lines = ["Reporte de rendimiento de funciones:"]
    for func_name, data in sorted(stats.items(), key=lambda x: x[1]['avg_time'], reverse=True):
        status = ''
        if data['avg_time'] >= THRESHOLD_CRITICAL:
            status = ' [CRÍTICO]'
        elif data['avg_time'] >= THRESHOLD_WARNING:
            status = ' [LENTO]'
        elif data['max_time'] >= THRESHOLD_CRITICAL:
            status = ' [PICOS ALTOS]'
        lines.append(
            f"  {func_name}{status}: {data['calls']} llamadas, "
            f"promedio {data['avg_time']:.0f} ms, máximo {data['max_time']:.0f} ms"
        )
    logger.info("\n".join(lines))


def reset_stats():
    """Reinicia todas las estadísticas (útil para testing)"""
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'ENABLE_PROFILING',
    'init_profiling',
    'profile_function',
    'get_function_stats',
    'log_function_stats_report',
    'reset_stats',
]
