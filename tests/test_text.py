import re

import pytest

from cfbstats.utils.text import (
    find_slug_collisions,
    format_percent,
    format_rank,
    slug_to_team_name,
    team_name_to_slug,
)


@pytest.mark.parametrize(
    "name,slug",
    [
        ("Ohio State", "ohio-state"),
        ("Texas A&M", "texas-am"),
        ("Miami (OH)", "miami-oh"),
        ("San José State", "san-jos-state"),
        ("  Hawai'i  ", "-hawaii-"),
    ],
)
def test_team_name_to_slug(name, slug):
    assert team_name_to_slug(name) == slug


@pytest.mark.parametrize("name", ["Ohio State", "Texas A&M", "UT San Antonio", "Appalachian State", "UL Monroe"])
def test_slug_idempotent_and_charset(name):
    slug = team_name_to_slug(name)
    assert team_name_to_slug(slug) == slug
    assert re.fullmatch(r"[a-z0-9-]*", slug)


def test_slug_to_team_name_is_approximate():
    assert slug_to_team_name("ohio-state") == "Ohio State"


def test_find_slug_collisions():
    collisions = find_slug_collisions(["Texas A&M", "Texas AM", "Ohio State", "Texas A&M"])
    assert collisions == {"texas-am": ["Texas A&M", "Texas AM"]}


def test_format_helpers():
    assert format_percent(0.4567) == "45.7%"
    assert [format_rank(n) for n in (1, 2, 3, 4, 11, 12, 13, 21, 102, 111)] == [
        "1st", "2nd", "3rd", "4th", "11th", "12th", "13th", "21st", "102nd", "111th",
    ]
