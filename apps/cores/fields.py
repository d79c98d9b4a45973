import json

from rest_framework import serializers


class FlexibleListField(serializers.Field):
    """
    A field that accepts JSON strings, Python lists, or comma-separated strings
    and always yields a list of non-empty, de-duplicated strings.
    Handles data from both FormData (JSON strings) and JSON requests.
    """
    def to_internal_value(self, data):
        if data is None or data == '':
            return []

        if isinstance(data, str):
            try:
                data = json.loads(data)
            except (json.JSONDecodeError, ValueError):
                data = data.split(',')

        if isinstance(data, dict):
            raise serializers.ValidationError("Expected a list of strings.")

        if not isinstance(data, (list, tuple)):
            data = [data]

        items = []
        for item in data:
            value = str(item).strip()
            if value and value not in items:
                items.append(value)
        return items

    def to_representation(self, value):
        return value or []
