"""Input validation utilities."""
import re
import base64
import binascii
import bleach


class ValidationError(Exception):
    """Raised when input validation fails."""
    pass


class Validator:
    """Input validation utilities."""

    # data:image/png;base64,<payload>
    DATA_URL_PATTERN = re.compile(r'^data:(?P<media>[\w.+-]+/(?P<subtype>[\w.+-]+))?;base64,', re.IGNORECASE)
    BASE64_WHITESPACE_PATTERN = re.compile(r'\s+')
    YEAR_PATTERN = re.compile(r'^\d{4}$')

    DEFAULT_IMAGE_EXTENSION = 'png'
    # Media subtypes whose conventional extension differs from the subtype name
    EXTENSION_ALIASES = {
        'jpeg': 'jpg',
        'svg+xml': 'svg',
    }

    @staticmethod
    def validate_coordinate(value, field_name, limit):
        """Validate a single latitude (limit=90) or longitude (limit=180)."""
        if value is None:
            return None
        try:
            if isinstance(value, str):
                value = value.strip()
                if not value:
                    return None
            number = float(value)
        except (ValueError, TypeError):
            raise ValidationError(f"{field_name} must be a valid number, got '{value}'")

        if not (-limit <= number <= limit):
            raise ValidationError(f"{field_name} must be between -{limit} and {limit}, got {number}")
        return number

    @staticmethod
    def validate_year_month(year, month):
        """Validate the year/month pair used by monthly queries.

        Returns:
            tuple: (year as 'YYYY', month as int 1-12)
        """
        if year is None or month is None or str(year).strip() == '' or str(month).strip() == '':
            raise ValidationError("Month and year are required")

        year = str(year).strip()
        if not Validator.YEAR_PATTERN.match(year):
            raise ValidationError("year must be a four digit number")

        try:
            month = int(str(month).strip())
        except ValueError:
            raise ValidationError("month must be a number between 1 and 12")
        if not (1 <= month <= 12):
            raise ValidationError("month must be a number between 1 and 12")
        return year, month

    @staticmethod
    def decode_base64_image(payload):
        """Decode a base64 image, with or without a data-URL header.

        Args:
            payload (str): Raw base64 or ``data:image/<type>;base64,<data>``

        Returns:
            tuple: (image bytes, file extension without dot)

        Raises:
            ValidationError: If the payload is empty or not valid base64
        """
        if not isinstance(payload, str) or not payload.strip():
            raise ValidationError("Image data must be a non-empty base64 string")

        extension = Validator.DEFAULT_IMAGE_EXTENSION
        data = payload.strip()
        match = Validator.DATA_URL_PATTERN.match(data)
        if match:
            subtype = match.group('subtype')
            if subtype:
                subtype = subtype.lower()
                extension = Validator.EXTENSION_ALIASES.get(subtype, subtype)
            data = data[match.end():]

        data = Validator.BASE64_WHITESPACE_PATTERN.sub('', data)
        try:
            image_bytes = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(f"Image data is not valid base64: {e}")

        if not image_bytes:
            raise ValidationError("Image data decoded to an empty file")
        return image_bytes, extension


def sanitize_html(text):
    """Strip markup from free-text fields using bleach."""
    if not text:
        return text
    # Plain text (the common case) is returned untouched so ampersands are not escaped
    if '<' not in text:
        return text
    return bleach.clean(text, tags=set(), attributes={}, strip=True)


def format_pydantic_errors(exc):
    """Flatten a pydantic ValidationError into a single readable message."""
    errors = []
    for error in exc.errors():
        field = '.'.join(str(x) for x in error['loc'])
        msg = error['msg']
        errors.append(f"{field}: {msg}" if field else msg)
    return '; '.join(errors)
