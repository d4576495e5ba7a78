from rest_framework import serializers


class VaccineTypeRefSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=10)


class VaccineSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=10)
    description = serializers.CharField(max_length=255)
    vaccineType = VaccineTypeRefSerializer()

    def validate_code(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('code must not be blank')
        return v


def format_vaccine(vaccine) -> dict:
    return {
        'code': vaccine.code,
        'description': vaccine.description,
        'vaccineType': {
            'code': vaccine.vaccine_type.code,
            'description': vaccine.vaccine_type.description,
        },
    }
