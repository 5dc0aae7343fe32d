"""Tests for recordism.attributes: dirty tracking, fill, accessors."""

from recordism.attributes import AttributeStore


class TestDirtyTracking:

    def test_new_key_is_dirty(self):
        store = AttributeStore()
        store.set_attribute("name", "a")
        assert store.is_dirty()
        assert store.changed_attributes == ("name",)

    def test_setting_unchanged_value_does_not_duplicate(self):
        store = AttributeStore({"name": "a"})
        store.clear_changed_attributes()
        store.set_attribute("name", "a")
        assert not store.is_dirty()
        store.set_attribute("name", "b")
        store.set_attribute("name", "b")
        store.set_attribute("name", "c")
        assert store.changed_attributes == ("name",)

    def test_reset_to_original_keeps_key_dirty(self):
        store = AttributeStore({"name": "a"})
        store.clear_changed_attributes()
        store.set_attribute("name", "b")
        store.set_attribute("name", "a")
        assert store.is_dirty()
        assert store.get_dirty_attributes() == {"name": "a"}

    def test_none_for_missing_key_is_a_change(self):
        store = AttributeStore()
        store.set_attribute("deleted_at", None)
        assert store.changed_attributes == ("deleted_at",)

    def test_is_dirty_matches_changed_length(self):
        store = AttributeStore()
        assert store.is_dirty() is (len(store.changed_attributes) > 0)
        store.set_attribute("x", 1)
        assert store.is_dirty() is (len(store.changed_attributes) > 0)
        store.clear_changed_attributes()
        assert store.is_dirty() is False

    def test_fill_marks_every_key_dirty(self):
        store = AttributeStore({"id": 1, "name": "a", "age": 3})
        assert store.changed_attributes == ("id", "name", "age")
        assert store.get_dirty_attributes() == {"id": 1, "name": "a", "age": 3}

    def test_dirty_attributes_only_contain_dirty_keys_in_order(self):
        store = AttributeStore({"id": 1, "name": "a", "age": 3})
        store.clear_changed_attributes()
        store.set_attribute("age", 4)
        store.set_attribute("name", "b")
        assert list(store.get_dirty_attributes().items()) == [("age", 4), ("name", "b")]

    def test_clear_keeps_values(self):
        store = AttributeStore({"name": "a"})
        store.clear_changed_attributes()
        assert store.get_attribute("name") == "a"
        assert store.get_dirty_attributes() == {}


class TestAccessors:

    class Owner:
        def get_label_attribute(self, attributes):
            return attributes["name"].upper()

        get_not_callable_attribute = "nope"

    def test_accessor_receives_raw_attributes(self):
        store = AttributeStore({"name": "ada"}, owner=self.Owner())
        assert store.get_attribute("label") == "ADA"
        assert store.has_attribute("label")

    def test_raw_value_without_accessor(self):
        store = AttributeStore({"name": "ada"}, owner=self.Owner())
        assert store.get_attribute("name") == "ada"
        assert store.get_attribute("missing") is None
        assert not store.has_attribute("missing")

    def test_non_callable_is_not_an_accessor(self):
        store = AttributeStore({"not_callable": 1}, owner=self.Owner())
        assert store.get_attribute("not_callable") == 1

    def test_no_owner(self):
        store = AttributeStore({"label": "raw"})
        assert store.get_attribute("label") == "raw"
