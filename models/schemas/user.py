from marshmallow import Schema, fields, pre_load, validate, validates, ValidationError

USER_NAME_MAX = 128


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def _check_password(value):
    if len(value) < 4:
        raise ValidationError("Password must be at least 4 characters long.")


class UserRegisterSchema(Schema):
    user_name = fields.String(
        data_key="userName",
        required=True,
        validate=validate.Length(min=1, max=USER_NAME_MAX),
    )
    password = fields.String(required=True, load_only=True)
    email = fields.Email(allow_none=True, load_default=None)
    phone_number = fields.String(
        data_key="phoneNumber", allow_none=True, load_default=None, validate=validate.Length(max=32)
    )

    @pre_load
    def normalize(self, data, **kwargs):
        # user names are matched exactly as stored, only surrounding blanks go
        if isinstance(data, dict) and "userName" in data:
            data = dict(data, userName=_strip(data["userName"]))
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        _check_password(value)


class UserLoginSchema(Schema):
    user_name = fields.String(data_key="userName", required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class UserUpdateSchema(Schema):
    email = fields.Email(allow_none=True)
    phone_number = fields.String(data_key="phoneNumber", allow_none=True, validate=validate.Length(max=32))
    active = fields.Boolean()


class UserRolesSchema(Schema):
    roles = fields.List(fields.String(validate=validate.Length(min=1)), required=True, validate=validate.Length(min=1))


class UserOutSchema(Schema):
    """Public view of a UserDto: never dumps the hash or refresh token."""

    user_id = fields.String(data_key="userId")
    user_name = fields.String(data_key="userName")
    email = fields.String(allow_none=True)
    phone_number = fields.String(data_key="phoneNumber", allow_none=True)
    active = fields.Boolean()
    roles = fields.List(fields.String())


class TokenOutSchema(Schema):
    access_token = fields.String(data_key="accessToken")
    token_type = fields.String(data_key="tokenType")
    expires_in = fields.Integer(data_key="expiresIn")
