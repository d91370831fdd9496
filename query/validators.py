"""
Parameter validators. Pure functions, no state, no I/O.

Both fail closed: anything that isn't clearly valid is rejected, and the
builder drops rejected values instead of failing the request.
"""

import re
from datetime import datetime

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

# ISO 639-1 codes accepted by the search API's `lang` filter
LANGUAGE_CODES = frozenset("""
    ab aa af ak sq am ar an hy as av ae ay az bm ba eu be bn bh bi bs br bg
    my ca ch ce ny zh cv kw co cr hr cs da dv nl dz en eo et ee fo fj fi fr
    ff gl ka de el gn gu ht ha he hz hi ho hu ia id ie ga ig ik io is it iu
    ja jv kl kn kr ks kk km ki rw ky kv kg ko ku kj la lb lg li ln lo lt lu
    lv gv mk mg ms ml mt mi mr mh mn na nv nd ne ng nb nn no ii nr oc oj cu
    om or os pa pi fa pl ps pt qu rm rn ro ru sa sc sd se sm sg sr gd sn si
    sk sl so st es su sw ss sv ta te tg th ti bo tk tl tn to tr ts tt tw ty
    ug uk ur uz ve vi vo wa cy wo fy xh yi yo za zu
""".split())


def is_valid_date(value: str | None) -> bool:
    """True iff value is exactly YYYY-MM-DD and names a real calendar day."""
    if not isinstance(value, str):
        return False
    if not _DATE_RE.fullmatch(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_valid_language_code(value: str | None) -> bool:
    """Exact membership test. 'en' passes, 'e' and 'en, fr' do not."""
    if not isinstance(value, str):
        return False
    return value.strip().lower() in LANGUAGE_CODES
