from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from backend.app.db import MoodEntry, Profile, SettingEntry


def _mood(profile_id: int, entry_date: date, level: int = 4) -> MoodEntry:
    now = datetime(2024, 7, 10, 9, 30)
    return MoodEntry(
        profile_id=profile_id,
        entry_date=entry_date,
        mood_level=level,
        mood_emoji="😄",
        mood_label="Happy",
        created_at=now,
        updated_at=now,
    )


@pytest.mark.anyio
async def test_profile_and_mood_entry_crud(temp_session_factory):
    session_factory = temp_session_factory

    async with session_factory() as session:
        profile = Profile(user_id="user-999")
        session.add(profile)
        await session.flush()
        entry = _mood(profile.id, date(2024, 7, 10))
        session.add(entry)
        await session.commit()

        await session.refresh(profile)
        await session.refresh(entry)

        assert profile.id > 0
        assert profile.streak == 0
        assert profile.last_activity_date is None
        assert entry.id > 0
        assert entry.notes is None

    async with session_factory() as session:
        entries = (await session.execute(select(MoodEntry))).scalars().all()
        assert [item.mood_label for item in entries] == ["Happy"]


@pytest.mark.anyio
async def test_one_mood_entry_per_profile_and_day(temp_session_factory):
    session_factory = temp_session_factory

    async with session_factory() as session:
        profile = Profile(user_id="user-1000")
        session.add(profile)
        await session.flush()
        profile_id = profile.id
        session.add(_mood(profile_id, date(2024, 7, 10)))
        await session.commit()

    async with session_factory() as session:
        session.add(_mood(profile_id, date(2024, 7, 10), level=2))
        with pytest.raises(IntegrityError):
            await session.commit()

    async with session_factory() as session:
        session.add(_mood(profile_id, date(2024, 7, 11), level=2))
        await session.commit()


@pytest.mark.anyio
async def test_profile_user_id_is_unique(temp_session_factory):
    session_factory = temp_session_factory

    async with session_factory() as session:
        session.add(Profile(user_id="twin"))
        await session.commit()

    async with session_factory() as session:
        session.add(Profile(user_id="twin"))
        with pytest.raises(IntegrityError):
            await session.commit()


@pytest.mark.anyio
async def test_setting_entry_unique_key(temp_session_factory):
    session_factory = temp_session_factory

    async with session_factory() as session:
        query = select(SettingEntry).where(SettingEntry.key == "schema_version")
        setting = (await session.execute(query)).scalar_one()
        assert setting.value == "test"
        setting.value = "next"
        await session.commit()

    async with session_factory() as session:
        query = select(SettingEntry).where(SettingEntry.key == "schema_version")
        setting = (await session.execute(query)).scalar_one()
        assert setting.value == "next"
