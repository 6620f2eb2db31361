"""
Auto-seeding of the station reference table
"""
from typing import List, Tuple

from sqlalchemy import select
import logging

from app.core.database import async_session
from app.models.station import Station

logger = logging.getLogger(__name__)


# BTS Skytrain Green Lines: Sukhumvit (N, CEN, E) and Silom (W, S)
GREEN_LINE_STATIONS: List[Tuple[str, str]] = [
    ("N24", "Khu Khot"),
    ("N23", "Yaek Kor Por Aor"),
    ("N22", "Royal Thai Air Force Museum"),
    ("N21", "Bhumibol Adulyadej Hospital"),
    ("N20", "Saphan Mai"),
    ("N19", "Sai Yud"),
    ("N18", "Phahon Yothin 59"),
    ("N17", "Wat Phra Sri Mahathat"),
    ("N16", "11th Infantry Regiment"),
    ("N15", "Bang Bua"),
    ("N14", "Royal Forest Department"),
    ("N13", "Kasetsart University"),
    ("N12", "Sena Nikhom"),
    ("N11", "Ratchayothin"),
    ("N10", "Phahon Yothin 24"),
    ("N9", "Ha Yaek Lat Phrao"),
    ("N8", "Mo Chit"),
    ("N7", "Saphan Khwai"),
    ("N5", "Ari"),
    ("N4", "Sanam Pao"),
    ("N3", "Victory Monument"),
    ("N2", "Phaya Thai"),
    ("N1", "Ratchathewi"),
    ("CEN", "Siam"),
    ("E1", "Chit Lom"),
    ("E2", "Phloen Chit"),
    ("E3", "Nana"),
    ("E4", "Asok"),
    ("E5", "Phrom Phong"),
    ("E6", "Thong Lo"),
    ("E7", "Ekkamai"),
    ("E8", "Phra Khanong"),
    ("E9", "On Nut"),
    ("E10", "Bang Chak"),
    ("E11", "Punnawithi"),
    ("E12", "Udom Suk"),
    ("E13", "Bang Na"),
    ("E14", "Bearing"),
    ("E15", "Samrong"),
    ("E16", "Pu Chao"),
    ("E17", "Chang Erawan"),
    ("E18", "Royal Thai Naval Academy"),
    ("E19", "Pak Nam"),
    ("E20", "Srinagarindra"),
    ("E21", "Phraek Sa"),
    ("E22", "Sai Luat"),
    ("E23", "Kheha"),
    ("W1", "National Stadium"),
    ("S1", "Ratchadamri"),
    ("S2", "Sala Daeng"),
    ("S3", "Chong Nonsi"),
    ("S4", "Saint Louis"),
    ("S5", "Surasak"),
    ("S6", "Saphan Taksin"),
    ("S7", "Krung Thon Buri"),
    ("S8", "Wongwian Yai"),
    ("S9", "Pho Nimit"),
    ("S10", "Talat Phlu"),
    ("S11", "Wutthakat"),
    ("S12", "Bang Wa"),
]


async def seed_if_empty() -> int:
    """Seed stations only if the table is empty; returns the number inserted"""
    async with async_session() as session:
        result = await session.execute(select(Station.id).limit(1))
        if result.scalar_one_or_none():
            logger.info("Station table already populated, skipping seeding")
            return 0

        logger.info("Empty station table detected, starting auto-seeding...")

        try:
            session.add_all(
                Station(id=station_id, name=name)
                for station_id, name in GREEN_LINE_STATIONS
            )
            await session.commit()
            logger.info(f"Auto-seeding completed: {len(GREEN_LINE_STATIONS)} stations")
            return len(GREEN_LINE_STATIONS)

        except Exception as e:
            await session.rollback()
            logger.error(f"Auto-seeding failed: {e}")
            raise
