"""Status page: JSON status endpoint plus a small self-refreshing HTML page."""

from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from . import __version__
from .status import StatusStore

STATUS_PAGE = """<!DOCTYPE html>
<html lang="pt-br">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Status do Bot Jinoca</title>
  <style>
    body { font-family: system-ui, sans-serif; display: grid; place-items: center; min-height: 100vh;
           background: #f4f4f5; color: #18181b; margin: 0; }
    .card { background: #fff; padding: 2rem; border-radius: 1rem; text-align: center;
            box-shadow: 0 10px 15px -3px rgb(0 0 0 / 0.1); }
    #qr img { width: 300px; height: 300px; border: 1px solid #e4e4e7; border-radius: 8px; margin-top: 1rem; }
    .loading { color: #f97316; } .error { color: #ef4444; } .success { color: #22c55e; }
  </style>
</head>
<body>
  <div class="card">
    <h1>Bot Jinoca 💋</h1>
    <div id="status" class="loading">Carregando...</div>
    <div id="qr"></div>
  </div>
  <script>
    const statusEl = document.getElementById('status');
    const qrEl = document.getElementById('qr');

    function show(text, cls) { statusEl.textContent = text; statusEl.className = cls; }

    async function refresh() {
      try {
        const data = await (await fetch('/status')).json();
        if (data.isAuthenticated) {
          show(data.status, 'success');
          qrEl.innerHTML = '';
        } else if (data.qr) {
          show('Escaneie o QR Code abaixo:', 'loading');
          qrEl.innerHTML = '<img alt="QR Code" src="' + data.qr + '">';
        } else {
          show(data.status, data.phase === 'fatal_error' ? 'error' : 'loading');
          qrEl.innerHTML = '';
        }
      } catch (err) {
        show('Erro ao buscar status.', 'error');
      }
    }

    refresh();
    setInterval(refresh, 5000);
  </script>
</body>
</html>
"""


def create_app(store: StatusStore) -> FastAPI:
    """Build the status app around a StatusStore (read-only)."""
    app = FastAPI(title="Jinoca status", version=__version__, docs_url=None, redoc_url=None)

    @app.get("/status")
    async def status() -> dict:
        return store.status.to_dict()

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        return STATUS_PAGE

    return app
