"""
Performance audit pipeline.

Runs Lighthouse over every (page URL × emulated device × run) of a site,
reduces the reports to min/median/max per metric and stores them against the
site's page URL actions.
"""


def load_models():
    """Import models so Base.metadata knows about every table."""
    import importlib
    importlib.import_module('perfaudit.models.log_action')
    importlib.import_module('perfaudit.models.log_performance')
    importlib.import_module('perfaudit.models.site_settings')
