"""Setup page deployed into the web bucket after the first deploy."""
from __future__ import annotations

from typing import Mapping
import html
import json


def render_setup_page(config: Mapping[str, str], urls: Mapping[str, str]) -> str:
    """Render the placeholder `index.html` listing configuration and access URLs.

    Values may be unresolved deploy-time tokens; they are substituted by the
    deployment, so the markup only escapes and never inspects them.
    """
    config_json = html.escape(json.dumps(dict(config), indent=2))
    url_items = "\n".join(
        f"            <li><strong>{html.escape(label)}:</strong> <code>{html.escape(url)}</code></li>"
        for label, url in urls.items()
    )
    return f"""<!DOCTYPE html>
<html>
<head>
    <title>S3 Explorer - Setup Required</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 40px; }}
        .container {{ max-width: 800px; margin: auto; }}
        code {{ background: #f4f4f4; padding: 2px 5px; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>S3 Explorer - Setup Required</h1>
        <p>The infrastructure has been deployed. Next steps:</p>
        <ol>
            <li>Create users in the Cognito user pool (or assign them in the external identity provider)</li>
            <li>Write the configuration below into the explorer client (<code>EXPLORER_*</code> variables or an outputs file)</li>
        </ol>
        <h2>Configuration:</h2>
        <pre>{config_json}</pre>
        <h2>Access URLs:</h2>
        <ul>
{url_items}
        </ul>
    </div>
</body>
</html>"""
