import pytest

from menuforge.modules.profiles.service import ProfileService
from menuforge.scripts.grant_credits import grant, main


def test_grant_activates_and_adds_credits(fake_db):
    fake_db.add_profile(email="chef@bistro.test")

    assert grant(ProfileService(fake_db), "chef@bistro.test", 3, activate=True) is True

    profile = fake_db.profile()
    assert profile["has_activated"] is True
    # activation sets the initial pack, then the extra credits land on top
    assert profile["menu_credits"] == 5 + 3


def test_grant_does_not_reactivate(fake_db):
    fake_db.add_profile(email="chef@bistro.test", has_activated=True, menu_credits=1)

    grant(ProfileService(fake_db), "chef@bistro.test", 0, activate=True)

    assert fake_db.profile()["menu_credits"] == 1


def test_grant_unknown_email(fake_db):
    assert grant(ProfileService(fake_db), "nobody@bistro.test", 5, activate=False) is False


def test_main_requires_an_action():
    with pytest.raises(SystemExit):
        main(["chef@bistro.test"])
