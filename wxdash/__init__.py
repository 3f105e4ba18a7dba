"""
wxdash package
==============

Weather damage analytics engine for installation damage records.

- The CLI entry point is in `wxdash/cli.py`.
- Dataset loading (CSV / Excel -> WeatherEvent) is in `wxdash/loader.py`.
- Event-type classification is in `wxdash/classify.py`.
- Filtering and the dashboard session state are in `wxdash/engine.py`.
- Grouped views (category, installation, year, event) are in `wxdash/aggregate.py`.
- Mitigation scenario math is in `wxdash/scenarios.py`.
"""

__version__ = '0.3.1'
