from html import escape
from string import Template

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from sysdash.api.deps import get_app_settings, get_identity
from sysdash.config import Settings
from sysdash.models.identity import HostIdentity

router = APIRouter()

_PAGE = Template("""<!DOCTYPE html><html lang="en"><head><meta charset="UTF-8">
<title>SysDash Dashboard</title>
<style>
body{background:#0f0f0f;color:#e0e0e0;font-family:'JetBrains Mono',monospace;text-align:center;padding:40px;}
.grid{display:grid;grid-template-columns:repeat(auto-fit,minmax(220px,1fr));gap:20px;max-width:900px;margin:0 auto;}
.card{background:#181818;border-radius:14px;padding:20px;box-shadow:0 0 12px #0008;}
h1{color:#9dfc91;}
</style></head><body>
<h1>SysDash - Local System Monitor</h1>
<div class="grid">
  <div class="card"><h3>OS</h3><p id="os">$os</p></div>
  <div class="card"><h3>Version</h3><p id="version">$version</p></div>
  <div class="card"><h3>Model</h3><p id="model">$model</p></div>
  <div class="card"><h3>CPU</h3><p id="cpu-name">$cpu</p></div>
  <div class="card"><h3>GPU</h3><p id="gpu">$gpu</p></div>
  <div class="card"><h3>RAM</h3><p id="ram-total">$ram_gb GB</p></div>
  <div class="card"><h3>CPU Load</h3><p id="cpu">--%</p></div>
  <div class="card"><h3>RAM Usage</h3><p id="ram">--%</p></div>
  <div class="card"><h3>Disk Usage</h3><p id="disk">--%</p></div>
  <div class="card"><h3>Uptime</h3><p id="uptime">--</p></div>
</div>
<script>
async function update(){
  const r=await fetch('/api/stats');
  if(!r.ok){return;}
  const d=await r.json();
  document.getElementById('cpu').textContent=d.cpu.toFixed(1)+'%';
  document.getElementById('ram').textContent=d.ram.toFixed(1)+'%';
  document.getElementById('disk').textContent=d.disk.toFixed(1)+'%';
  document.getElementById('uptime').textContent=d.uptime;
}
setInterval(update,$poll_interval_ms);update();
</script></body></html>
""")


def render_dashboard(identity: HostIdentity, poll_interval_ms: int) -> str:
    """Render the dashboard page with the static identity facts inlined."""
    return _PAGE.substitute(
        os=escape(identity.os),
        version=escape(identity.version),
        model=escape(identity.model),
        cpu=escape(identity.cpu),
        gpu=escape(identity.gpu),
        ram_gb=f"{identity.ram_gb:.2f}",
        poll_interval_ms=int(poll_interval_ms),
    )


@router.get("/", response_class=HTMLResponse, summary="Dashboard page")
async def dashboard(
    identity: HostIdentity = Depends(get_identity),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    return HTMLResponse(render_dashboard(identity, settings.poll_interval_ms))
