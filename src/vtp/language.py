"""ISO 639 language lookup for subtitle display metadata.

Track language tags in Matroska and MP4 files are 3-letter ISO 639-2 codes,
usually the bibliographic (B) form. ``lookup`` resolves such a tag to its
2-letter ISO 639-1 code and an English display name. Terminological (T)
codes such as "deu" resolve to the same entry as their B form.
"""

from dataclasses import dataclass

UNDEFINED_LANGUAGE = "und"


@dataclass(frozen=True)
class LanguageInfo:
    """Resolved language: 3-letter code, 2-letter code and display name."""

    code: str
    two_letter: str
    name: str


# ISO 639-2/B -> (ISO 639-1, English name)
_ISO_639_2B: dict[str, tuple[str, str]] = {
    "aar": ("aa", "Afar"),
    "abk": ("ab", "Abkhazian"),
    "afr": ("af", "Afrikaans"),
    "alb": ("sq", "Albanian"),
    "amh": ("am", "Amharic"),
    "ara": ("ar", "Arabic"),
    "arm": ("hy", "Armenian"),
    "asm": ("as", "Assamese"),
    "aym": ("ay", "Aymara"),
    "aze": ("az", "Azerbaijani"),
    "bak": ("ba", "Bashkir"),
    "baq": ("eu", "Basque"),
    "bel": ("be", "Belarusian"),
    "ben": ("bn", "Bengali"),
    "bih": ("bh", "Bihari"),
    "bis": ("bi", "Bislama"),
    "bre": ("br", "Breton"),
    "bul": ("bg", "Bulgarian"),
    "bur": ("my", "Burmese"),
    "cat": ("ca", "Catalan"),
    "chi": ("zh", "Chinese"),
    "cos": ("co", "Corsican"),
    "cze": ("cs", "Czech"),
    "dan": ("da", "Danish"),
    "dut": ("nl", "Dutch"),
    "dzo": ("dz", "Dzongkha"),
    "eng": ("en", "English"),
    "epo": ("eo", "Esperanto"),
    "est": ("et", "Estonian"),
    "fao": ("fo", "Faroese"),
    "fij": ("fj", "Fijian"),
    "fin": ("fi", "Finnish"),
    "fre": ("fr", "French"),
    "fry": ("fy", "Western Frisian"),
    "geo": ("ka", "Georgian"),
    "ger": ("de", "German"),
    "gla": ("gd", "Scottish Gaelic"),
    "gle": ("ga", "Irish"),
    "glg": ("gl", "Galician"),
    "gre": ("el", "Greek"),
    "grn": ("gn", "Guarani"),
    "guj": ("gu", "Gujarati"),
    "hau": ("ha", "Hausa"),
    "heb": ("he", "Hebrew"),
    "hin": ("hi", "Hindi"),
    "hrv": ("hr", "Croatian"),
    "hun": ("hu", "Hungarian"),
    "ice": ("is", "Icelandic"),
    "iku": ("iu", "Inuktitut"),
    "ile": ("ie", "Interlingue"),
    "ina": ("ia", "Interlingua"),
    "ind": ("id", "Indonesian"),
    "ipk": ("ik", "Inupiaq"),
    "ita": ("it", "Italian"),
    "jav": ("jv", "Javanese"),
    "jpn": ("ja", "Japanese"),
    "kal": ("kl", "Kalaallisut"),
    "kan": ("kn", "Kannada"),
    "kas": ("ks", "Kashmiri"),
    "kaz": ("kk", "Kazakh"),
    "khm": ("km", "Khmer"),
    "kin": ("rw", "Kinyarwanda"),
    "kir": ("ky", "Kyrgyz"),
    "kor": ("ko", "Korean"),
    "kur": ("ku", "Kurdish"),
    "lao": ("lo", "Lao"),
    "lat": ("la", "Latin"),
    "lav": ("lv", "Latvian"),
    "lin": ("ln", "Lingala"),
    "lit": ("lt", "Lithuanian"),
    "mac": ("mk", "Macedonian"),
    "mal": ("ml", "Malayalam"),
    "mao": ("mi", "Maori"),
    "mar": ("mr", "Marathi"),
    "may": ("ms", "Malay"),
    "mlg": ("mg", "Malagasy"),
    "mlt": ("mt", "Maltese"),
    "mon": ("mn", "Mongolian"),
    "nau": ("na", "Nauru"),
    "nep": ("ne", "Nepali"),
    "nor": ("no", "Norwegian"),
    "oci": ("oc", "Occitan"),
    "ori": ("or", "Oriya"),
    "orm": ("om", "Oromo"),
    "pan": ("pa", "Punjabi"),
    "per": ("fa", "Persian"),
    "pol": ("pl", "Polish"),
    "por": ("pt", "Portuguese"),
    "pus": ("ps", "Pashto"),
    "que": ("qu", "Quechua"),
    "roh": ("rm", "Romansh"),
    "rum": ("ro", "Romanian"),
    "run": ("rn", "Rundi"),
    "rus": ("ru", "Russian"),
    "sag": ("sg", "Sango"),
    "san": ("sa", "Sanskrit"),
    "sin": ("si", "Sinhala"),
    "slo": ("sk", "Slovak"),
    "slv": ("sl", "Slovenian"),
    "sme": ("se", "Northern Sami"),
    "smo": ("sm", "Samoan"),
    "sna": ("sn", "Shona"),
    "snd": ("sd", "Sindhi"),
    "som": ("so", "Somali"),
    "sot": ("st", "Southern Sotho"),
    "spa": ("es", "Spanish"),
    "srp": ("sr", "Serbian"),
    "ssw": ("ss", "Swati"),
    "sun": ("su", "Sundanese"),
    "swa": ("sw", "Swahili"),
    "swe": ("sv", "Swedish"),
    "tam": ("ta", "Tamil"),
    "tat": ("tt", "Tatar"),
    "tel": ("te", "Telugu"),
    "tgk": ("tg", "Tajik"),
    "tgl": ("tl", "Tagalog"),
    "tha": ("th", "Thai"),
    "tib": ("bo", "Tibetan"),
    "tir": ("ti", "Tigrinya"),
    "ton": ("to", "Tonga"),
    "tsn": ("tn", "Tswana"),
    "tso": ("ts", "Tsonga"),
    "tuk": ("tk", "Turkmen"),
    "tur": ("tr", "Turkish"),
    "twi": ("tw", "Twi"),
    "uig": ("ug", "Uyghur"),
    "ukr": ("uk", "Ukrainian"),
    "urd": ("ur", "Urdu"),
    "uzb": ("uz", "Uzbek"),
    "vie": ("vi", "Vietnamese"),
    "vol": ("vo", "Volapük"),
    "wel": ("cy", "Welsh"),
    "wol": ("wo", "Wolof"),
    "xho": ("xh", "Xhosa"),
    "yid": ("yi", "Yiddish"),
    "yor": ("yo", "Yoruba"),
    "zha": ("za", "Zhuang"),
    "zul": ("zu", "Zulu"),
}

# ISO 639-2/T (terminological) -> ISO 639-2/B, where the codes differ
_ISO_639_2T_TO_639_2B: dict[str, str] = {
    "bod": "tib",
    "ces": "cze",
    "cym": "wel",
    "deu": "ger",
    "ell": "gre",
    "eus": "baq",
    "fas": "per",
    "fra": "fre",
    "hye": "arm",
    "isl": "ice",
    "kat": "geo",
    "mkd": "mac",
    "mri": "mao",
    "msa": "may",
    "mya": "bur",
    "nld": "dut",
    "ron": "rum",
    "slk": "slo",
    "sqi": "alb",
    "zho": "chi",
}


def lookup(code: str | None) -> LanguageInfo | None:
    """Resolve a 3-letter language tag.

    Args:
        code: ISO 639-2 code as tagged on the track (case-insensitive).

    Returns:
        LanguageInfo for known codes, None for unknown codes, empty input
        and the "und" sentinel.

    Examples:
        >>> lookup("ger").name
        'German'
        >>> lookup("deu").two_letter
        'de'
        >>> lookup("und") is None
        True
    """
    if not code:
        return None
    normalized = code.strip().casefold()
    if normalized == UNDEFINED_LANGUAGE:
        return None
    normalized = _ISO_639_2T_TO_639_2B.get(normalized, normalized)
    entry = _ISO_639_2B.get(normalized)
    if entry is None:
        return None
    return LanguageInfo(code=normalized, two_letter=entry[0], name=entry[1])
