# income_dashboard/views/widget_embed.py
from __future__ import annotations
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

VIZ_ID     = "viz1744229295000"
VIZ_NAME   = "AnalysisofHousePrice_17441589744680/AnalysisofHousePricesandHowincomeaffectingpurchasingpower"
STATIC_IMG = ("https://public.tableau.com/static/images/An/AnalysisofHousePrice_17441589744680/"
              "AnalysisofHousePricesandHowincomeaffectingpurchasingpower/1")
SCRIPT_URL = "https://public.tableau.com/javascripts/api/viz_v1.js"

EMBED_HTML = f"""
<div class='tableauPlaceholder' id='{VIZ_ID}' style='position: relative'>
  <noscript>
    <a href='#'>
      <img alt='Analysis of House Prices and How income affecting purchasing power'
           src='{STATIC_IMG}_rss.png' style='border: none' />
    </a>
  </noscript>
  <object class='tableauViz' style='display:none;'>
    <param name='host_url' value='https%3A%2F%2Fpublic.tableau.com%2F' />
    <param name='embed_code_version' value='3' />
    <param name='site_root' value='' />
    <param name='name' value='{VIZ_NAME}' />
    <param name='tabs' value='no' />
    <param name='toolbar' value='yes' />
    <param name='static_image' value='{STATIC_IMG}.png' />
    <param name='animate_transition' value='yes' />
    <param name='display_static_image' value='yes' />
    <param name='display_spinner' value='yes' />
    <param name='display_overlay' value='yes' />
    <param name='display_count' value='yes' />
    <param name='language' value='en-US' />
  </object>
</div>
"""

# sizes the viz to 4:3 of its container, then loads the activation script in front of it
ACTIVATE_JS = f"""
(function () {{
  var div = document.getElementById('{VIZ_ID}');
  if (!div) return;
  var viz = div.getElementsByTagName('object')[0];
  if (!viz) return;
  viz.style.width = '100%';
  viz.style.height = (div.offsetWidth * 0.75) + 'px';
  var s = document.createElement('script');
  s.src = '{SCRIPT_URL}';
  viz.parentNode.insertBefore(s, viz);
}})();
"""


def embed_document() -> str:
    """A standalone page holding the widget and one activation script."""
    return ("<!DOCTYPE html><html><head><meta charset='utf-8'>"
            "<style>html,body{margin:0;padding:0;}</style></head><body>"
            f"{EMBED_HTML}<script>{ACTIVATE_JS}</script></body></html>")


@dataclass
class EmbedResource:
    """The Tableau widget for one mount. Its document exists only while attached."""
    doc: str | None = None

    @property
    def attached(self) -> bool:
        return self.doc is not None

    def acquire(self) -> "EmbedResource":
        if self.attached:
            raise RuntimeError("embed is already attached to a mount")
        self.doc = embed_document()
        logger.debug("tableau embed attached")
        return self

    def release(self, _=None) -> None:
        if self.doc is None:
            return
        self.doc = None
        logger.debug("tableau embed detached")

    def document(self) -> str:
        """srcDoc for the iframe."""
        if self.doc is None:
            raise RuntimeError("embed is not attached")
        return self.doc
