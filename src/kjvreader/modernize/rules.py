"""Default archaic-to-modern rule tables for 1611 English text.

Order matters: pattern rules run first, top to bottom, and each sees the
output of the ones above it. Word rules then run in the order listed.
"""

from __future__ import annotations

# Spelling patterns, matched anywhere inside a word ("euen" inside "heauen")
ARCHAIC_SPELLING_PATTERNS: tuple[tuple[str, str], ...] = (
    # Vowel replacements
    ("heauen", "heaven"),
    ("euen", "even"),
    ("seuen", "seven"),
    ("ouer", "over"),
    ("euery", "every"),
    ("euil", "evil"),
    ("deuil", "devil"),
    ("Iesu", "Jesu"),
    ("Iesus", "Jesus"),
    ("iust", "just"),
    ("iudge", "judge"),
    ("iudgment", "judgment"),
    ("ioy", "joy"),
    ("iourney", "journey"),
    ("loue", "love"),
    ("liue", "live"),
    ("saue", "save"),
    ("haue", "have"),
    ("giue", "give"),
    ("receiue", "receive"),
    ("beleeue", "believe"),
    ("leaue", "leave"),
    ("vp", "up"),
    ("vs", "us"),
    ("vnto", "unto"),
    ("vpon", "upon"),
    ("vnder", "under"),
    # Other common archaic spellings
    ("sonne", "son"),
    ("sunne", "sun"),
    ("citie", "city"),
    ("dayes", "days"),
    ("doore", "door"),
    ("thinke", "think"),
    ("sinne", "sin"),
    ("shippe", "ship"),
    ("spirite", "spirit"),
    ("lorde", "lord"),
    ("soule", "soul"),
    ("onely", "only"),
    ("assoone", "as soon"),
    ("betweene", "between"),
    ("seruant", "servant"),
    ("seruice", "service"),
    ("yeeres", "years"),
    ("owne", "own"),
    ("Ioseph", "Joseph"),
    ("Iacob", "Jacob"),
    ("Ierusalem", "Jerusalem"),
    ("Iohn", "John"),
    ("Iordan", "Jordan"),
    ("Iudea", "Judea"),
    ("Iudah", "Judah"),
)

# Whole words only: "art" must never touch "heart" or "article"
ARCHAIC_WORDS: tuple[tuple[str, str], ...] = (
    # Doubled-vowel pronouns; as fragments they would hit "thee", "sheep", "between"
    ("hee", "he"),
    ("shee", "she"),
    ("wee", "we"),
    ("thee", "you"),
    ("thou", "you"),
    ("thy", "your"),
    ("thine", "your"),
    ("ye", "you"),
    ("hast", "have"),
    ("hath", "has"),
    ("dost", "do"),
    ("doth", "does"),
    ("didst", "did"),
    ("shalt", "shall"),
    ("wilt", "will"),
    ("art", "are"),
    ("cometh", "comes"),
    ("goeth", "goes"),
    ("knoweth", "knows"),
    ("seeketh", "seeks"),
    ("findeth", "finds"),
    ("giveth", "gives"),
    ("taketh", "takes"),
    ("maketh", "makes"),
    ("speaketh", "speaks"),
    ("heareth", "hears"),
    ("seeth", "sees"),
    ("walketh", "walks"),
    ("doeth", "does"),
    ("saith", "says"),
    ("whither", "where"),
    ("thither", "there"),
    ("hither", "here"),
    ("behold", "look"),
    ("wherefore", "therefore"),
    ("verily", "truly"),
    ("unto", "to"),
    ("mine", "my"),
    ("spake", "spoke"),
    ("begat", "fathered"),
    ("brethren", "brothers"),
    ("amongst", "among"),
    ("whilst", "while"),
)
