"""Shared fixtures: a small damage spreadsheet with a few bad rows."""

import pytest

from wxdash.engine import Dashboard
from wxdash.loader import parse_weather_csv

# 10 data rows: rows 4 (cost "abc"), 8 (empty cost) and 9 (month 13) are invalid.
SAMPLE_CSV = """Branch,Weather Event,Named Storm,Date of Weather Event,Year,Cost,Installation,State
Army,Hurricane,Ian,09/28/22,2022,500000,Fort Stewart,GA
Army,Winter Storm,Elliott,12/23/22,2022,120000,Fort Drum,NY
Army,Tropical Storm with high wind,,08/10/23,2023,300000,Fort Bragg,NC
Army,Flood,,02/01/23,2023,abc,Fort Hood,TX
Army,Torando,,04/05/23,2023,80000,Fort Polk,LA
Army,Hail,,05/14/24,2024,20000,Fort Hood,TX
Army,Flash Flood,,06/30/24,2024,150000,Fort Hood,TX
Army,Wildfire,,07/04/24,2024,,Fort Carson,CO
Army,Severe Storm,,13/01/24,2024,5000,Fort Riley,KS
Army,Earthquake,,03/03/24,2024,70000,Camp Zama,
"""

SAMPLE_TOTAL = 1_240_000.0


@pytest.fixture
def sample_csv_text():
    return SAMPLE_CSV


@pytest.fixture
def sample_result():
    return parse_weather_csv(SAMPLE_CSV)


@pytest.fixture
def sample_events(sample_result):
    return sample_result.events


@pytest.fixture
def sample_csv_path(tmp_path):
    path = tmp_path / "ag3_data_v3.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def dashboard(sample_events):
    return Dashboard(events=sample_events)
