"""Shared test models and helpers."""

from recordism import Model, model, relation
from recordism.events import EVENT_NAMES, emitter


@model
class User(Model, table="users"):
    hidden = ("password",)
    appends = ("full_name",)

    def get_full_name_attribute(self, attributes):
        return f"{attributes.get('first_name')} {attributes.get('last_name') or ''}".strip()

    @relation
    def posts(self):
        return self.has_many("Post", "user_id")

    @relation
    def profile(self):
        return self.has_one("Profile")

    @relation
    def roles(self):
        return self.belongs_to_many("Role", "role_user")


@model
class StampedUser(Model, table="users", timestamps=True):
    pass


@model
class Post(Model, table="posts"):

    @relation
    def author(self):
        return self.belongs_to(User, "user_id")


@model
class Profile(Model, table="profiles"):
    pass


@model
class Role(Model, table="roles"):
    pass


def record_events():
    """Register a listener on every lifecycle event; return the list the event names are appended to."""
    fired = []
    for name in EVENT_NAMES:
        emitter.add_listener(name, lambda record, name=name: fired.append(name))
    return fired
