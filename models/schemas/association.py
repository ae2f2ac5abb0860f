from marshmallow import Schema, ValidationError, fields, validate

NAME_MAX = 128


def _non_blank(s):
    if not s.strip():
        raise ValidationError("Name must not be blank")


class AssociationCreateSchema(Schema):
    name = fields.String(required=True, validate=[validate.Length(max=NAME_MAX), _non_blank])
    website = fields.String(load_default="", validate=validate.Length(max=255))
    active = fields.Boolean(load_default=True)


class AssociationUpdateSchema(Schema):
    name = fields.String(validate=[validate.Length(max=NAME_MAX), _non_blank])
    website = fields.String(validate=validate.Length(max=255))
    active = fields.Boolean()


class AssociationOutSchema(Schema):
    association_id = fields.String(data_key="associationId")
    name = fields.String()
    website = fields.String(allow_none=True)
    active = fields.Boolean()
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)
    deleted_at = fields.DateTime(data_key="deletedAt", allow_none=True)
