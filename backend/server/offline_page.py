"""
Offline fallback document.

Served at OFFLINE_PAGE_PATH while a display is in OFFLINE mode. The page
does not reload itself; recovery attempts are driven by the controller's
offline recovery timer.
"""

OFFLINE_HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Offline</title>
  <style>
    html, body {
      margin: 0;
      height: 100%;
      background: #111;
      color: #eee;
      font-family: sans-serif;
    }
    body {
      display: flex;
      align-items: center;
      justify-content: center;
      text-align: center;
    }
    h1 { font-size: 3rem; margin-bottom: 0.5rem; }
    p { font-size: 1.25rem; opacity: 0.7; }
  </style>
</head>
<body>
  <main>
    <h1>Service unavailable</h1>
    <p>This display will reconnect automatically.</p>
  </main>
</body>
</html>
"""
