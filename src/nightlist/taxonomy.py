"""Mapping Vesper classifications to eBird taxa."""

# Vesper classes that only resolve to a group, and the closest eBird "sp." taxon.
# Unclassified tseep and thrush calls come through with an empty code.
SLASH_MATCHES = {
    "": "passerine sp.",
    "unkn": "bird sp.",
    "zeep": "warbler sp. (Parulidae sp.)",  # All zeeps are warblers
    "sparrow": "sparrow sp.",
    "peep": "peep sp.",
}

# Often the result of pressing "N" (Next) while classifying in Vesper.
OPERATOR_CHECK_CODES = {"nowa"}


def is_slash(code: str) -> bool:
    """True for codes that only identify a group of species."""
    return code in SLASH_MATCHES or "sp." in code


def needs_operator_check(code: str) -> bool:
    return code in OPERATOR_CHECK_CODES


def common_name(code: str, codes: dict[str, str], slash_codes: dict[str, str] | None = None) -> str:
    """Resolve a Vesper code to an eBird common name.

    Args:
        code: Vesper species code (any case)
        codes: Four-letter code to common name table, upper-case keys
        slash_codes: Extra slash and hybrid codes from settings

    Returns:
        Common name, or the code itself when it is unknown
    """
    code = code.lower()
    if code in SLASH_MATCHES:
        return SLASH_MATCHES[code]

    upper = code.upper()
    for table in (slash_codes or {}, codes):
        if upper in table:
            return table[upper]
    return code


def display_code(code: str) -> str:
    """Code as shown in the console: "Passerine sp." or "AMRE"."""
    name = SLASH_MATCHES.get(code, code)
    if "sp." in name:
        return name[:1].upper() + name[1:]
    return name.upper()
