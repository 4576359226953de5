"""
User-facing message catalog.

WHAT: Maps message keys to localized strings (Ukrainian and English).

WHY: Clients display API messages verbatim, so every message returned to a
user goes through one catalog. Keys stay stable for tests while the
wording can change per locale.

HOW: ``get_message(key, **params)`` looks the key up in the configured
``settings.LOCALE`` (falling back to English) and formats it with params.
"""

from typing import Any, Dict, Optional

from muza_accounts.core.config import settings


DEFAULT_LOCALE = "en"

MESSAGES: Dict[str, Dict[str, str]] = {
    "uk": {
        # Verification codes
        "invalid_or_expired_code": "Невірний або прострочений код",
        "code_verified": "Код підтверджено успішно",
        # Email change
        "email_change_fields_required": "Новий email та ID користувача обов'язкові",
        "invalid_email_format": "Невірний формат email",
        "email_same_as_current": "Новий email має відрізнятися від поточного",
        "email_exists": "Цей email вже використовується іншим обліковим записом",
        "pending_email_change": "Код підтвердження вже надіслано на цей email. Перевірте пошту",
        "email_change_code_sent": "Код підтвердження надіслано на новий email",
        "email_verify_fields_required": "Новий email, код підтвердження та ID користувача обов'язкові",
        "user_exists": "Користувач з таким email вже існує",
        "email_changed": "Email успішно змінено",
        "email_required": "Email обов'язковий",
        "code_resent": "Новий код підтвердження надіслано",
        # Password
        "passwords_required": "Поточний та новий паролі обов'язкові",
        "password_too_short": "Новий пароль має містити щонайменше {min_length} символів",
        "current_password_incorrect": "Поточний пароль невірний",
        "password_changed": "Пароль успішно змінено",
        # Profile
        "user_not_found": "Користувача не знайдено",
        "name_required": "Ім'я обов'язкове",
        "name_updated": "Ім'я успішно оновлено",
        "image_required": "Зображення не завантажено",
        "image_type_invalid": "Дозволені лише файли зображень",
        "image_too_large": "Розмір зображення не може перевищувати {max_mb} МБ",
        "image_uploaded": "Зображення профілю оновлено",
        "image_removed": "Зображення профілю видалено",
        "account_deleted": "Обліковий запис видалено",
        "material_resend": "Матеріал буде надіслано на вашу пошту найближчим часом",
        "forbidden_other_user": "Операція дозволена лише для власного облікового запису",
        # Purchases
        "product_id_required": "ID продукту обов'язковий",
        "product_not_found": "Продукт не знайдено",
        "purchase_recorded": "Покупку збережено",
        "purchase_not_found": "Придбаний продукт не знайдено",
        "purchase_removed": "Покупку видалено",
        # Registration and login
        "registration_code_sent": "Код підтвердження надіслано на email",
        "pending_verification": "Код підтвердження вже надіслано на цей email. Перевірте пошту",
        "registration_fields_required": "Email, код підтвердження, ім'я та пароль обов'язкові",
        "password_required": "Пароль обов'язковий",
        "registration_complete": "Реєстрацію завершено",
        "invalid_credentials": "Невірний email або пароль",
        # Downstream failures
        "email_send_failed": "Не вдалося надіслати лист підтвердження",
        "internal_error": "Сталася непередбачена помилка",
        # Emails
        "subject_registration": "Підтвердження електронної пошти - Muza Life",
        "subject_email_change": "Підтвердження зміни електронної пошти - Muza Life",
        "subject_email_changed_notice": "Вашу електронну пошту змінено - Muza Life",
        "email_code_intro_registration": "Дякуємо за реєстрацію! Ваш код підтвердження:",
        "email_code_intro_email_change": "Ви запросили зміну електронної пошти. Ваш код підтвердження:",
        "email_code_validity": "Код дійсний протягом {minutes} хвилин.",
        "email_code_ignore": "Якщо ви не робили цей запит, просто проігноруйте цей лист.",
        "email_changed_notice": "Електронну пошту вашого облікового запису змінено на {new_email}.",
        "email_changed_warning": "Якщо це були не ви, негайно зверніться до служби підтримки.",
    },
    "en": {
        "invalid_or_expired_code": "Invalid or expired code",
        "code_verified": "Code verified successfully",
        "email_change_fields_required": "New email and user id are required",
        "invalid_email_format": "Invalid email format",
        "email_same_as_current": "New email must differ from the current email",
        "email_exists": "This email is already used by another account",
        "pending_email_change": "A verification code was already sent to this email. Check your inbox",
        "email_change_code_sent": "Verification code sent to the new email",
        "email_verify_fields_required": "New email, verification code and user id are required",
        "user_exists": "A user with this email already exists",
        "email_changed": "Email changed successfully",
        "email_required": "Email is required",
        "code_resent": "A new verification code was sent",
        "passwords_required": "Current and new passwords are required",
        "password_too_short": "New password must be at least {min_length} characters long",
        "current_password_incorrect": "Current password is incorrect",
        "password_changed": "Password changed successfully",
        "user_not_found": "User not found",
        "name_required": "Name is required",
        "name_updated": "Name updated successfully",
        "image_required": "No image uploaded",
        "image_type_invalid": "Only image files are allowed",
        "image_too_large": "Image size must not exceed {max_mb} MB",
        "image_uploaded": "Profile image updated",
        "image_removed": "Profile image removed",
        "account_deleted": "Account deleted",
        "material_resend": "Material will be sent to your email shortly",
        "forbidden_other_user": "This operation is only allowed on your own account",
        "product_id_required": "Product id is required",
        "product_not_found": "Product not found",
        "purchase_recorded": "Purchase recorded",
        "purchase_not_found": "Purchased product not found",
        "purchase_removed": "Purchase removed",
        "registration_code_sent": "Verification code sent to your email",
        "pending_verification": "A verification code was already sent to this email. Check your inbox",
        "registration_fields_required": "Email, verification code, name and password are required",
        "password_required": "Password is required",
        "registration_complete": "Registration complete",
        "invalid_credentials": "Invalid email or password",
        "email_send_failed": "Failed to send verification email",
        "internal_error": "An unexpected error occurred",
        "subject_registration": "Email confirmation - Muza Life",
        "subject_email_change": "Email change confirmation - Muza Life",
        "subject_email_changed_notice": "Your email was changed - Muza Life",
        "email_code_intro_registration": "Thank you for signing up! Your verification code:",
        "email_code_intro_email_change": "You requested an email change. Your verification code:",
        "email_code_validity": "The code is valid for {minutes} minutes.",
        "email_code_ignore": "If you did not make this request, just ignore this email.",
        "email_changed_notice": "The email of your account was changed to {new_email}.",
        "email_changed_warning": "If this was not you, contact support immediately.",
    },
}


def get_message(key: str, locale: Optional[str] = None, **params: Any) -> str:
    """
    Resolve a message key to a localized string.

    Args:
        key: Catalog key
        locale: Locale override (defaults to settings.LOCALE)
        **params: Values for str.format placeholders

    Returns:
        Localized message; the key itself if no locale defines it
    """
    catalog = MESSAGES.get(locale or settings.LOCALE, MESSAGES[DEFAULT_LOCALE])
    template = catalog.get(key) or MESSAGES[DEFAULT_LOCALE].get(key, key)
    return template.format(**params) if params else template
