from datetime import date, datetime, timezone

import pytest

from zalna.errors import NotFoundError
from zalna.models.enums import HallStatus, PricingModel
from zalna.schemas.hall import HallSearchFilters
from zalna.schemas.media import MediaCreate
from zalna.schemas.pricing import AddonCreate, BlockedDateCreate
from zalna.services.hall_query_service import hall_query_service
from zalna.services.media_service import media_service
from zalna.services.pricing_service import pricing_service

from factories import add_priced_product, make_active_hall, make_hall


async def _search(db, **filters):
    return await hall_query_service.get_public_hall_list(db, HallSearchFilters(**filters))


async def _set_created(db, hall, year):
    hall.created_at = datetime(year, 1, 1, tzinfo=timezone.utc)
    await db.commit()


class TestPublicList:
    async def test_only_active_halls(self, db):
        active = await make_active_hall(db, name="Active")
        await make_hall(db, name="Draft")
        await make_hall(db, name="Archived", status=HallStatus.ARCHIVED)

        result = await _search(db)
        assert [c.id for c in result["data"]] == [active.id]
        assert result["total"] == 1

    async def test_starting_price_is_minimum_rate(self, db):
        hall = await make_active_hall(db)
        await add_priced_product(db, hall.id, 900, name="Wedding")
        await add_priced_product(db, hall.id, 350, currency="CDF", name="Birthday")

        card = (await _search(db))["data"][0]
        assert card.starting_from_price == 350
        assert card.starting_from_currency == "CDF"

    async def test_unpriced_hall_has_no_price_or_currency(self, db):
        await make_active_hall(db)
        card = (await _search(db))["data"][0]
        assert card.starting_from_price is None
        assert card.starting_from_currency is None

    async def test_price_bounds_and_price_sort(self, db):
        cheap = await make_active_hall(db, name="Cheap")
        mid = await make_active_hall(db, name="Mid")
        pricey = await make_active_hall(db, name="Pricey")
        await make_active_hall(db, name="Unpriced")
        await add_priced_product(db, cheap.id, 50)
        await add_priced_product(db, mid.id, 400)
        await add_priced_product(db, pricey.id, 800)
        extra = await make_active_hall(db, name="Low")
        await add_priced_product(db, extra.id, 100)

        result = await _search(db, price_min=100, price_max=500, sort_by="price_asc")
        assert [c.name for c in result["data"]] == ["Low", "Mid"]
        assert result["total"] == 2

    async def test_price_desc_puts_unpriced_last(self, db):
        low = await make_active_hall(db, name="Low")
        high = await make_active_hall(db, name="High")
        await make_active_hall(db, name="Unpriced")
        await add_priced_product(db, low.id, 100)
        await add_priced_product(db, high.id, 300)

        result = await _search(db, sort_by="price_desc")
        assert [c.name for c in result["data"]] == ["High", "Low", "Unpriced"]

    async def test_inactive_products_do_not_price_the_hall(self, db):
        hall = await make_active_hall(db)
        await add_priced_product(db, hall.id, 10, is_active=False)
        await add_priced_product(db, hall.id, 200)

        card = (await _search(db))["data"][0]
        assert card.starting_from_price == 200

    async def test_blocked_date_excludes_hall(self, db):
        open_ended = await make_active_hall(db, name="Open ended")
        bounded = await make_active_hall(db, name="Bounded")
        free = await make_active_hall(db, name="Free")
        await pricing_service.create_blocked_date(db, open_ended.id, BlockedDateCreate(start_date=date(2026, 1, 1)))
        await pricing_service.create_blocked_date(
            db, bounded.id, BlockedDateCreate(start_date=date(2026, 6, 1), end_date=date(2026, 6, 3))
        )

        on_june_2 = await _search(db, available_on=date(2026, 6, 2))
        assert {c.id for c in on_june_2["data"]} == {free.id}

        on_june_10 = await _search(db, available_on=date(2026, 6, 10))
        assert {c.id for c in on_june_10["data"]} == {bounded.id, free.id}

    async def test_keyword_matches_product_name(self, db):
        hall = await make_active_hall(db, name="Le Palais")
        await make_active_hall(db, name="Other")
        await add_priced_product(db, hall.id, 100, name="Mariage Royal")

        result = await _search(db, q="royal")
        assert [c.id for c in result["data"]] == [hall.id]

    async def test_keyword_matches_city_case_insensitively(self, db):
        hall = await make_active_hall(db, city="Lubumbashi")
        await make_active_hall(db, city="Kinshasa")

        result = await _search(db, q="LUBUM")
        assert [c.id for c in result["data"]] == [hall.id]

    async def test_event_type_filters_on_category(self, db):
        wedding = await make_active_hall(db, name="W")
        conference = await make_active_hall(db, name="C")
        await add_priced_product(db, wedding.id, 100, category="WEDDING")
        await add_priced_product(db, conference.id, 100, category="CONFERENCE")

        result = await _search(db, event_type="CONFERENCE")
        assert [c.id for c in result["data"]] == [conference.id]

    async def test_city_and_capacity_filters(self, db):
        small = await make_active_hall(db, name="Small", capacity=80)
        await make_active_hall(db, name="Large", capacity=600)
        await make_active_hall(db, name="Elsewhere", city="Goma", capacity=100)

        result = await _search(db, city="Kinshasa", capacity_min=50, capacity_max=200)
        assert [c.id for c in result["data"]] == [small.id]

    async def test_featured_sort_premium_then_newest(self, db):
        old_premium = await make_active_hall(db, name="Old premium", is_premium=True)
        new_plain = await make_active_hall(db, name="New plain")
        old_plain = await make_active_hall(db, name="Old plain")
        await _set_created(db, old_premium, 2020)
        await _set_created(db, new_plain, 2025)
        await _set_created(db, old_plain, 2021)

        result = await _search(db)
        assert [c.id for c in result["data"]] == [old_premium.id, new_plain.id, old_plain.id]

    async def test_relevance_sort(self, db):
        premium = await make_active_hall(db, name="Premium", is_premium=True)
        pricey = await make_active_hall(db, name="Pricey")
        cheap = await make_active_hall(db, name="Cheap")
        new_unpriced = await make_active_hall(db, name="New unpriced")
        old_unpriced = await make_active_hall(db, name="Old unpriced")
        await add_priced_product(db, pricey.id, 300)
        await add_priced_product(db, cheap.id, 100)
        await _set_created(db, new_unpriced, 2025)
        await _set_created(db, old_unpriced, 2020)

        result = await _search(db, sort_by="relevance")
        assert [c.id for c in result["data"]] == [
            premium.id, cheap.id, pricey.id, new_unpriced.id, old_unpriced.id,
        ]

    async def test_capacity_sort(self, db):
        await make_active_hall(db, name="Small", capacity=50)
        await make_active_hall(db, name="Big", capacity=500)
        await make_active_hall(db, name="Unknown")

        result = await _search(db, sort_by="capacity_desc")
        assert [c.name for c in result["data"]] == ["Big", "Small", "Unknown"]

    async def test_paging(self, db):
        for i in range(5):
            hall = await make_active_hall(db, name=f"Hall {i}")
            await _set_created(db, hall, 2020 + i)

        result = await _search(db, page=2, limit=2)
        assert [c.name for c in result["data"]] == ["Hall 2", "Hall 1"]
        assert result["total"] == 5
        assert result["page"] == 2

    async def test_hero_image_on_card(self, db):
        hall = await make_active_hall(db)
        media = await media_service.create_media(db, MediaCreate(hall_id=hall.id, file_url="https://cdn.test/hero.jpg"))
        await media_service.tag_media_by_name(db, media.id, "HERO", is_primary=True)

        card = (await _search(db))["data"][0]
        assert card.hero_image_url == "https://cdn.test/hero.jpg"


class TestPublicDetail:
    async def test_draft_hall_is_not_found(self, db):
        hall = await make_hall(db)
        with pytest.raises(NotFoundError):
            await hall_query_service.get_public_hall_detail(db, hall.slug)

    async def test_unknown_slug(self, db):
        with pytest.raises(NotFoundError):
            await hall_query_service.get_public_hall_detail(db, "nowhere")

    async def test_detail_composition(self, db):
        hall = await make_active_hall(db, name="Grand Salon", cancellation_policy="48h notice")
        await add_priced_product(db, hall.id, 500, name="Wedding")
        await add_priced_product(db, hall.id, 99, name="Hidden", is_active=False)
        await pricing_service.create_addon(db, hall.id, AddonCreate(
            name="Chairs", pricing_model=PricingModel.PER_PACK, unit_price=20, pack_size=10, redevance_amount=2,
        ))
        await pricing_service.create_addon(db, hall.id, AddonCreate(
            name="Retired", pricing_model=PricingModel.FIXED_EVENT, unit_price=5, is_active=False,
        ))
        hero = await media_service.create_media(db, MediaCreate(hall_id=hall.id, file_url="https://cdn.test/h.jpg"))
        await media_service.tag_media_by_name(db, hero.id, "HERO", is_primary=True)

        detail = await hall_query_service.get_public_hall_detail(db, "Grand Salon Kinshasa")

        assert detail.id == hall.id
        assert detail.cancellation_policy == "48h notice"
        assert detail.hero_image_url == "https://cdn.test/h.jpg"
        assert [m.id for m in detail.gallery] == [hero.id]
        assert [p.name for p in detail.products] == ["Wedding"]
        assert detail.products[0].rates[0].price == 500
        assert [a.name for a in detail.addons] == ["Chairs"]
        assert "redevance_amount" not in detail.addons[0].model_dump()
