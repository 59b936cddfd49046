"""Vulture whitelist: references that look unused but are reached dynamically.

Entry points run by console_scripts, pytest fixtures injected by name,
service methods called through the sidecar ``METHODS`` table and
dataclass hooks.

Usage:
    vulture sealedfolio tests vulture_whitelist.py
"""

# ── Entry points (called by setuptools console_scripts, not imported) ──
from sealedfolio.main import main  # noqa: F401

# ── Service methods (looked up by name in sealedfolio.main.METHODS) ──
from sealedfolio.service import PortfolioService

# ── Pytest fixtures (injected by pytest, never called directly) ──
from tests.conftest import clock  # noqa: F401
from tests.conftest import db  # noqa: F401
from tests.conftest import make_item  # noqa: F401
from tests.conftest import sample_items  # noqa: F401

# ── Dataclass lifecycle hooks (called by @dataclass, not user code) ──
from sealedfolio.models import PortfolioItem

PortfolioService.report  # noqa: B018
PortfolioService.list_items  # noqa: B018
PortfolioService.save_item  # noqa: B018
PortfolioService.delete_item  # noqa: B018
PortfolioService.refresh_prices  # noqa: B018
PortfolioService.refresh_status  # noqa: B018
PortfolioService.search_catalog  # noqa: B018
PortfolioService.get_settings  # noqa: B018
PortfolioService.update_settings  # noqa: B018
PortfolioService.export_json  # noqa: B018
PortfolioService.import_json  # noqa: B018
PortfolioService.export_csv  # noqa: B018
PortfolioItem.__post_init__  # noqa: B018
