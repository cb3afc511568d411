"""Shared fixtures for stormharm tests."""

import bz2
from datetime import date

import pytest

from stormharm.models import RawEventRecord

HEADER = "STATE__,BGN_DATE,COUNTY,EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,CROPDMGEXP,REFNUM"


def make_raw(event_type="TORNADO", begin=date(2000, 1, 1), fatalities=0, injuries=0,
             prop_dmg=0.0, prop_exp="", crop_dmg=0.0, crop_exp=""):
    return RawEventRecord(
        event_type=event_type,
        begin_date=begin,
        fatalities=fatalities,
        injuries=injuries,
        prop_dmg=prop_dmg,
        prop_exp=prop_exp,
        crop_dmg=crop_dmg,
        crop_exp=crop_exp,
    )


@pytest.fixture
def storm_lines():
    """A small storm data extract, including pre-1980 and malformed rows."""
    return [
        HEADER,
        '1.00,4/18/1950 0:00:00,97,TORNADO,4,15,25,K,0,,1',
        '1.00,6/1/1999 0:00:00,3,TSTM WIND,1,0,5,K,0,,2',
        '1.00,1/1/2001 0:00:00,5,THUNDERSTORM WINDS,2,3,1,M,10,K,3',
        '1.00,5/3/1999 0:00:00,40,TORNADO,36,583,1.5,B,2,m,4',
        '1.00,7/19/1995 0:00:00,12,Excessive Heat,33,100,0,,0,,5',
        '1.00,8/29/2005 0:00:00,22,FLOOD,0,0,3,X,0,?,6',
        '1.00,not a date,22,FLOOD,1,1,1,K,0,,7',
        '1.00,3/2/2004 0:00:00,22,FLOOD,lots,1,1,K,0,,8',
    ]


@pytest.fixture
def storm_csv_bz2(tmp_path, storm_lines):
    path = tmp_path / "StormData.csv.bz2"
    with bz2.open(path, "wt", encoding="utf-8") as f:
        f.write("\n".join(storm_lines) + "\n")
    return str(path)
