import bleach
from rest_framework import serializers


def clean_text(value):
    """Strip markup from free text coming from the SPA."""
    if value is None:
        return value
    return bleach.clean(value.strip(), tags=[], strip=True)


class EntitySerializer(serializers.ModelSerializer):
    """ModelSerializer with explicit entity <-> transport mapping.

    ``from_entity`` renders a model (related display names flattened).
    ``to_entity`` builds an *unsaved* model from ``validated_data`` with
    foreign keys set by id only; callers reattach related objects.
    """

    @classmethod
    def from_entity(cls, obj) -> dict:
        return cls(obj).data

    @classmethod
    def from_entities(cls, objs) -> list:
        return cls(objs, many=True).data

    def to_entity(self):
        return self.Meta.model(**self.validated_data)
