"""Tests for teaching materials."""

import pytest

from sparkskool.core.materials import (
    MAX_MATERIALS,
    MaterialValidationError,
    delete_material,
    list_materials,
    save_material,
)


class TestSaveMaterial:
    def test_defaults(self, store):
        material = save_material("Fractions\nHalves and quarters", store=store)

        assert material.id.startswith("material:")
        assert material.title == "Fractions"
        assert material.category == "other"
        assert material.user_id == "teacher123"

    def test_empty_content(self, store):
        with pytest.raises(MaterialValidationError):
            save_material("   ", store=store)

    def test_newest_first(self, store):
        save_material("First", store=store)
        save_material("Second", category="quiz", store=store)

        assert [m.title for m in list_materials(store=store)] == ["Second", "First"]
        assert [m.title for m in list_materials(category="quiz", store=store)] == ["Second"]

    def test_capped(self, store):
        for i in range(MAX_MATERIALS + 3):
            save_material(f"Material {i}", store=store)

        materials = list_materials(store=store)
        assert len(materials) == MAX_MATERIALS
        assert materials[0].title == f"Material {MAX_MATERIALS + 2}"
        assert len({m.id for m in materials}) == MAX_MATERIALS

    def test_delete(self, store):
        material = save_material("Worksheet", store=store)

        assert delete_material(material.id, store=store)
        assert list_materials(store=store) == []
        assert not delete_material(material.id, store=store)


class TestConcurrentMaterials:
    def test_parallel_saves_keep_every_material(self, store, run_concurrently):
        run_concurrently(lambda i: save_material(f"Worksheet {i}", store=store))

        materials = list_materials(store=store)
        assert len(materials) == 16
        assert len({m.id for m in materials}) == 16
