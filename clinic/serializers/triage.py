from rest_framework import serializers

from clinic.services.priority import sanitize_vital
from clinic.services.text import clean_text


class VitalField(serializers.Field):
    """A raw form vital.  Blank, unparsable, zero or negative means not measured."""

    def __init__(self, *, max_value, **kwargs):
        self.max_value = max_value
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = sanitize_vital(data)
        if value is not None and value > self.max_value:
            raise serializers.ValidationError(f'Ensure this value is less than or equal to {self.max_value}.')
        return value

    def to_representation(self, value):
        return value


class VitalsSerializer(serializers.Serializer):
    bp_sys = VitalField(max_value=400)
    diastolic_bp = VitalField(max_value=300)
    heart_rate = VitalField(max_value=300)
    temperature = VitalField(max_value=50)
    spo2 = VitalField(max_value=100)


class TriageRecordSerializer(VitalsSerializer):
    patient_id = serializers.IntegerField(min_value=1)
    symptoms = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate_symptoms(self, v):
        return clean_text(v)
