"""
Load the card catalog.

Reads card records from a JSON file or URL and upserts them into the cards
table. Accepts either stored records (card_id, category, domains, ...) or
raw scraped records (id, cardType, domain, energyCost, ...).
Can be run as a standalone script or called from a scheduler.
"""

import argparse
import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from riftdeck.db.database import async_session_factory, init_db
from riftdeck.db.operations import upsert_card
from riftdeck.models.card import Card, CardCategory

logger = logging.getLogger(__name__)

_DOMAIN_SEPARATORS = re.compile(r"[,;/|]")


def _int_or_none(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _domains(value: Any) -> frozenset[str]:
    if not value:
        return frozenset()
    if isinstance(value, str):
        parts = _DOMAIN_SEPARATORS.split(value)
    else:
        parts = list(value)
    return frozenset(p.strip() for p in parts if p and p.strip())


def parse_card(record: dict[str, Any]) -> Card:
    """
    Build a Card from a stored or raw catalog record.

    Raises:
        ValueError: If the record has no id or an unknown category
    """
    card_id = record.get("card_id") or record.get("id")
    if not card_id:
        msg = "Card record has no id"
        raise ValueError(msg)

    category = record.get("category") or record.get("cardType") or ""
    return Card(
        card_id=str(card_id),
        name=record.get("name") or str(card_id),
        category=CardCategory.parse(category),
        domains=_domains(record.get("domains", record.get("domain"))),
        tags=tuple(record.get("tags") or ()),
        energy=_int_or_none(record.get("energy", record.get("energyCost"))),
        power=_int_or_none(record.get("power", record.get("powerCost"))),
        might=_int_or_none(record.get("might")),
        rarity=record.get("rarity"),
    )


async def read_records(source: str) -> list[dict[str, Any]]:
    """Read card records from a local path or an http(s) URL."""
    if source.startswith(("http://", "https://")):
        async with httpx.AsyncClient(follow_redirects=True, timeout=30.0) as client:
            response = await client.get(source)
            response.raise_for_status()
            payload = response.json()
    else:
        payload = json.loads(Path(source).read_text(encoding="utf-8"))

    if isinstance(payload, dict):
        payload = payload.get("cards", [])
    if not isinstance(payload, list):
        msg = f"Expected a list of cards in {source}"
        raise ValueError(msg)
    return payload


async def load_cards(
    records: list[dict[str, Any]],
    session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> int:
    """
    Upsert catalog cards.

    Records that cannot be parsed are skipped with a warning.

    Returns:
        Number of cards written
    """
    count = 0
    async with session_factory() as session:
        for record in records:
            try:
                card = parse_card(record)
            except ValueError as e:
                logger.warning("Skipping card %s: %s", record.get("card_id") or record.get("id"), e)
                continue
            await upsert_card(session, card)
            count += 1
        await session.commit()

    logger.info("Loaded %d of %d cards", count, len(records))
    return count


async def run_load(source: str) -> int:
    """Create tables if needed, then load cards from source."""
    logger.info("Loading cards from %s...", source)

    try:
        await init_db()
        records = await read_records(source)
        return await load_cards(records)
    except (httpx.HTTPError, OSError, ValueError) as e:
        logger.error("Failed to load cards from %s: %s", source, e)
        raise


def main() -> None:
    """CLI entry point for loading the card catalog."""
    parser = argparse.ArgumentParser(description="Load cards into the riftdeck catalog")
    parser.add_argument(
        "source",
        help="Path or http(s) URL of a JSON list of cards",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_load(args.source))


if __name__ == "__main__":
    main()
