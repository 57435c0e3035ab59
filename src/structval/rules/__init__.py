"""Standard rules shipped with structval.

Available rules:
- required, optional, gte, lte, gender
- isodate, mindate, maxdate
- az_, aZ09_, name, email, resourcename, resourcepattern
- zoneinfo, locale, url

Standard aliases:
- username:  aZ09_,gte=4,lte=20
- birthdate: isodate,mindate=1900-01-01,maxdate=now
"""

from structval.rules import dates, standard, text
from structval.types import Rule

STANDARD_RULES: tuple[Rule, ...] = (
    Rule("required", standard.required, standard.required_err),
    Rule("optional", standard.optional, None),
    Rule("gte", standard.gte, standard.gte_err),
    Rule("lte", standard.lte, standard.lte_err),
    Rule("gender", standard.gender, standard.gender_err),
    Rule("isodate", dates.isodate, dates.isodate_err),
    Rule("mindate", dates.mindate, dates.mindate_err),
    Rule("maxdate", dates.maxdate, dates.maxdate_err),
    Rule("name", text.name, text.name_err),
    Rule("az_", text.az, text.az_err),
    Rule("aZ09_", text.az09, text.az09_err),
    Rule("zoneinfo", text.zoneinfo, text.zoneinfo_err),
    Rule("locale", text.locale, text.locale_err),
    Rule("url", text.url, text.url_err),
    Rule("email", text.email, text.email_err),
    Rule("resourcename", text.resource_name, text.resource_name_err),
    Rule("resourcepattern", text.resource_pattern, text.resource_pattern_err),
)

# Order matters: an alias may only reference rules and earlier aliases.
STANDARD_ALIASES: dict[str, str] = {
    "username": "aZ09_,gte=4,lte=20",
    "birthdate": "isodate,mindate=1900-01-01,maxdate=now",
    "az-identifier": "az_",
    "alnum-identifier": "aZ09_",
    "resource-name": "resourcename",
    "resource-pattern": "resourcepattern",
}


def standard_rules() -> dict[str, Rule]:
    """Return the standard rules keyed by name."""
    return {rule.name: rule for rule in STANDARD_RULES}


__all__ = [
    "STANDARD_ALIASES",
    "STANDARD_RULES",
    "standard_rules",
]
