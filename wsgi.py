# ==============================================================================
# WSGI Entry Point - Para Gunicorn en producción
# ==============================================================================
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# Para desarrollo local:
#   python wsgi.py
# ==============================================================================

import os

from tienda.main import create_app

app = create_app()

if __name__ == '__main__':
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))

    if not DEBUG:
        print(f"\n{'='*50}")
        print(f"  Servidor iniciado en http://{HOST}:{PORT}")
        print(f"{'='*50}\n")

    app.run(host=HOST, port=PORT, debug=DEBUG)
