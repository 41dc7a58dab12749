"""
Relationship resolver tests: layout, lookups, link and unlink.
"""

import logging

import pytest

from webink.models import Relationship, relations
from webink.models.relations import (
    kind_of,
    holds_foreign_key,
    join_table_name,
    find_related,
    find_related_single,
    unlink_all,
    link_all,
)

from sample_models import AppleTree, Wig, ColorSpray


async def _fk_of(db, wig):
    rows = await db.query('SELECT "apple_tree_id" FROM "wig" WHERE "ref" = ?', [wig.pk])
    return rows[0]["apple_tree_id"]


class TestLayout:

    def test_kind_of(self):
        assert kind_of(AppleTree, Wig) is Relationship.MANY_ONE
        assert kind_of(Wig, AppleTree) is Relationship.ONE_MANY
        assert kind_of(AppleTree, ColorSpray) is Relationship.MANY_MANY
        assert kind_of(Wig, ColorSpray) is None

    def test_holds_foreign_key(self):
        assert holds_foreign_key(Wig, AppleTree, Relationship.ONE_MANY) is True
        assert holds_foreign_key(AppleTree, Wig, Relationship.MANY_ONE) is False
        assert holds_foreign_key(AppleTree, ColorSpray, Relationship.MANY_MANY) is False

    def test_join_table_name_symmetric(self):
        assert join_table_name(AppleTree, ColorSpray) == "apple_tree_color_spray"
        assert join_table_name(ColorSpray, AppleTree) == "apple_tree_color_spray"


class TestFindRelated:

    @pytest.mark.asyncio
    async def test_no_relationship_returns_empty(self, db):
        assert await find_related(db, Wig, 1, ColorSpray) == []

    @pytest.mark.asyncio
    async def test_both_directions_of_foreign_key(self, db):
        tree = await AppleTree(color="red", note="", height=3).save(db)
        wig = Wig(length=10)
        wig.apple_tree = tree
        await wig.save(db)

        assert await find_related(db, AppleTree, tree.pk, Wig) == [wig]
        assert await find_related(db, Wig, wig.pk, AppleTree) == [tree]

    @pytest.mark.asyncio
    async def test_extra_filter(self, db):
        tree = await AppleTree(color="red", note="", height=3).save(db)
        for length in (5, 15, 25):
            wig = Wig(length=length)
            wig.apple_tree = tree
            await wig.save(db)

        long_wigs = await find_related(
            db, AppleTree, tree.pk, Wig, 'AND "length" > ? ORDER BY "length"', [10]
        )
        assert [w.length for w in long_wigs] == [15, 25]

    @pytest.mark.asyncio
    async def test_single_with_several_rows_warns(self, db, caplog):
        tree = await AppleTree(color="red", note="", height=3).save(db)
        await AppleTree(color="green", note="", height=4).save(db)
        spray = await ColorSpray(color="blue").save(db)
        await link_all(db, spray, AppleTree, [tree.pk, tree.pk + 1])

        with caplog.at_level(logging.WARNING, logger="webink.models.relations"):
            result = await find_related_single(db, ColorSpray, spray.pk, AppleTree)

        assert result is None
        assert "expected one" in caplog.text

    @pytest.mark.asyncio
    async def test_single_with_one_row(self, db):
        tree = await AppleTree(color="red", note="", height=3).save(db)
        wig = Wig(length=1)
        wig.apple_tree = tree.pk
        await wig.save(db)

        assert await find_related_single(db, Wig, wig.pk, AppleTree) == tree
        assert await find_related_single(db, Wig, wig.pk + 100, AppleTree) is None


class TestLinking:

    @pytest.mark.asyncio
    async def test_unlink_without_links_is_noop(self, db):
        tree = await AppleTree(color="red", note="", height=3).save(db)
        wig = await Wig(length=1).save(db)

        await unlink_all(db, tree, Wig)
        await unlink_all(db, wig, AppleTree)
        await unlink_all(db, tree, ColorSpray)

        assert await _fk_of(db, wig) is None
        assert await db.query('SELECT * FROM "apple_tree_color_spray"') == []

    @pytest.mark.asyncio
    async def test_unlink_unrelated_model_issues_nothing(self, db, statements):
        wig = await Wig(length=1).save(db)
        statements.clear()
        await unlink_all(db, wig, ColorSpray)
        assert statements == []

    @pytest.mark.asyncio
    async def test_last_value_wins_on_singular_side(self, db):
        first = await AppleTree(color="red", note="", height=1).save(db)
        second = await AppleTree(color="green", note="", height=2).save(db)
        wig = await Wig(length=1).save(db)

        await link_all(db, wig, AppleTree, [first, second])
        assert await _fk_of(db, wig) == second.pk

    @pytest.mark.asyncio
    async def test_many_one_link_sets_foreign_key_on_target(self, db):
        tree = await AppleTree(color="red", note="", height=1).save(db)
        wigs = [await Wig(length=n).save(db) for n in (1, 2)]

        await link_all(db, tree, Wig, wigs)
        assert [await _fk_of(db, w) for w in wigs] == [tree.pk, tree.pk]

        await unlink_all(db, tree, Wig)
        assert [await _fk_of(db, w) for w in wigs] == [None, None]

    @pytest.mark.asyncio
    async def test_many_many_duplicates_allowed(self, db):
        tree = await AppleTree(color="red", note="", height=1).save(db)
        spray = await ColorSpray(color="blue").save(db)

        await link_all(db, tree, ColorSpray, [spray, spray])
        rows = await db.query('SELECT * FROM "apple_tree_color_spray"')
        assert len(rows) == 2

    @pytest.mark.asyncio
    async def test_link_rejects_wrong_model(self, db):
        tree = await AppleTree(color="red", note="", height=1).save(db)
        spray = await ColorSpray(color="blue").save(db)

        with pytest.raises(TypeError):
            await link_all(db, tree, Wig, spray)

    @pytest.mark.asyncio
    async def test_link_rejects_unsaved_entity(self, db):
        tree = await AppleTree(color="red", note="", height=1).save(db)

        with pytest.raises(ValueError, match="unsaved"):
            await link_all(db, tree, Wig, Wig(length=3))

    @pytest.mark.asyncio
    async def test_one_one_link_moves_target(self, db):
        from webink.models import Model, Column, PrimaryKey
        class Citizen(Model):
            id = PrimaryKey()
            name = Column("TEXT")

            class Meta:
                foreign = {"Passport": "one_one"}

        class Passport(Model):
            number = PrimaryKey()
            country = Column("TEXT")

            class Meta:
                foreign = {"Citizen": "one_one"}

        for sql in Citizen.create_statements(db) + Passport.create_statements(db):
            await db.execute(sql)

        alice = await Citizen(name="alice").save(db)
        bob = await Citizen(name="bob").save(db)
        passport = await Passport(country="NL").save(db)

        await relations.link_all(db, alice, Passport, passport)
        await relations.link_all(db, passport, Citizen, bob)

        assert await find_related(db, Passport, passport.pk, Citizen) == [bob]
        assert await find_related(db, Citizen, alice.pk, Passport) == []
