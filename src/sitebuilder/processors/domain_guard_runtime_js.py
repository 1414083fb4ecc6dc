"""Domain-lock runtime code generator for JavaScript.

This module generates the self-invoking guard prepended to every JavaScript
output when an allow-list of domains is configured. At page load the guard
replaces the document body with an "Unauthorized Access" notice and throws,
unless the page is opened from disk, from localhost, from the hosting
platform suffix, or from an allowed domain or one of its subdomains.
"""

import json
from typing import List, Optional


def generate_domain_guard(
    allowed_domains: Optional[List[str]],
    hosting_suffix: str = ".pages.dev",
) -> str:
    """Generate the JavaScript domain-lock guard.

    Args:
        allowed_domains: Hostnames accepted by the guard. ``None`` or an
            empty list disables the guard.
        hosting_suffix: Hostname suffix of the hosting platform that is
            always accepted.

    Returns:
        The guard snippet, or an empty string when disabled. The snippet has
        no trailing newline and is prepended directly to the script.
    """
    if not allowed_domains:
        return ""

    domains_array = json.dumps(allowed_domains, separators=(",", ":"))

    return f"""(function(){{
    var a={domains_array};
    var h=location.hostname;
    if(location.protocol!=='file:'&&h!==''&&h!=='localhost'&&!h.endsWith('{hosting_suffix}')&&!a.some(function(d){{return h===d||h.endsWith('.'+d);}})){{
      document.body.innerHTML='<div style="text-align:center;margin-top:200px;font-size:20px;">Unauthorized Access</div>';
      throw new Error('Domain verification failed');
    }}
  }})();"""
