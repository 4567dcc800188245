"""Simple two-language (en/ar) label helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "prayer_Fajr": {
        "en": "Fajr",
        "ar": "الفجر",
    },
    "prayer_Dhuhr": {
        "en": "Dhuhr",
        "ar": "الظهر",
    },
    "prayer_Asr": {
        "en": "Asr",
        "ar": "العصر",
    },
    "prayer_Maghrib": {
        "en": "Maghrib",
        "ar": "المغرب",
    },
    "prayer_Isha": {
        "en": "Isha",
        "ar": "العشاء",
    },
    "special_Imsak": {
        "en": "Imsak",
        "ar": "الإمساك",
    },
    "special_Sunrise": {
        "en": "Sunrise",
        "ar": "الشروق",
    },
    "special_Sunset": {
        "en": "Sunset",
        "ar": "الغروب",
    },
    "special_Midnight": {
        "en": "Midnight",
        "ar": "منتصف الليل",
    },
    "special_FirstThird": {
        "en": "First Third",
        "ar": "الثلث الأول",
    },
    "special_LastThird": {
        "en": "Last Third",
        "ar": "الثلث الأخير",
    },
    "special_desc_Imsak": {
        "en": "Stop eating for Fajr",
        "ar": "الإمساك عن الطعام قبل الفجر",
    },
    "special_desc_Sunrise": {
        "en": "Sun rises",
        "ar": "شروق الشمس",
    },
    "special_desc_Sunset": {
        "en": "Sun sets",
        "ar": "غروب الشمس",
    },
    "special_desc_Midnight": {
        "en": "Islamic midnight",
        "ar": "منتصف الليل الشرعي",
    },
    "special_desc_FirstThird": {
        "en": "First third of night",
        "ar": "الثلث الأول من الليل",
    },
    "special_desc_LastThird": {
        "en": "Best time for Tahajjud",
        "ar": "أفضل وقت للتهجد",
    },
    "direction_north": {
        "en": "North",
        "ar": "شمال",
    },
    "direction_north_east": {
        "en": "North-East",
        "ar": "شمال شرق",
    },
    "direction_east": {
        "en": "East",
        "ar": "شرق",
    },
    "direction_south_east": {
        "en": "South-East",
        "ar": "جنوب شرق",
    },
    "direction_south": {
        "en": "South",
        "ar": "جنوب",
    },
    "direction_south_west": {
        "en": "South-West",
        "ar": "جنوب غرب",
    },
    "direction_west": {
        "en": "West",
        "ar": "غرب",
    },
    "direction_north_west": {
        "en": "North-West",
        "ar": "شمال غرب",
    },
    "adjust_none": {
        "en": "No adjustment",
        "ar": "بدون تعديل",
    },
    "adjust_later": {
        "en": "+{minutes} min",
        "ar": "+{minutes} د",
    },
    "adjust_earlier": {
        "en": "-{minutes} min",
        "ar": "-{minutes} د",
    },
    "adjust_desc_none": {
        "en": "Prayer time is not adjusted",
        "ar": "وقت الصلاة غير معدل",
    },
    "adjust_desc_later_one": {
        "en": "Prayer time is 1 minute later than calculated",
        "ar": "وقت الصلاة متأخر دقيقة واحدة عن المحسوب",
    },
    "adjust_desc_later": {
        "en": "Prayer time is {minutes} minutes later than calculated",
        "ar": "وقت الصلاة متأخر {minutes} دقيقة عن المحسوب",
    },
    "adjust_desc_earlier_one": {
        "en": "Prayer time is 1 minute earlier than calculated",
        "ar": "وقت الصلاة متقدم دقيقة واحدة عن المحسوب",
    },
    "adjust_desc_earlier": {
        "en": "Prayer time is {minutes} minutes earlier than calculated",
        "ar": "وقت الصلاة متقدم {minutes} دقيقة عن المحسوب",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
