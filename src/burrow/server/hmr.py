"""Live reload: the browser half of the dev server's reload stream.

Documents served in dev mode get a small script that opens an
``EventSource`` on the broadcast endpoint and reloads the page when the
server reports a change.
"""

from __future__ import annotations

# Path of the server-sent events endpoint the script connects to
BROADCAST_PATH = "/__burrow/broadcast"

# Server-sent event name carrying reload notifications
RELOAD_EVENT = "burrow:reload"

# Native EventSource only; no client library needed.  The stream ends after
# one notification, so the script reloads on the event and reconnects with
# a delay if the connection drops for any other reason.
RELOAD_SCRIPT = f"""\
<script data-burrow-reload>
(function() {{
  var src = new EventSource('{BROADCAST_PATH}');
  src.addEventListener('{RELOAD_EVENT}', function() {{
    src.close();
    location.reload();
  }});
  src.onerror = function() {{
    src.close();
    setTimeout(function() {{ location.reload(); }}, 2000);
  }};
}})();
</script>
"""


def inject_reload_script(html: str) -> str:
    """Insert the live reload script into an HTML document.

    Goes before ``</body>`` if present, else before ``</html>``, else
    at the end.

    """
    if "</body>" in html:
        return html.replace("</body>", RELOAD_SCRIPT + "</body>", 1)
    if "</html>" in html:
        return html.replace("</html>", RELOAD_SCRIPT + "</html>", 1)
    return html + RELOAD_SCRIPT
