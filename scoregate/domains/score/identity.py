# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Deterministic score record identity.

The record id is derived from the business tuple so that a second record
for the same teacher, student, class, subject, year and semester collides
on insert instead of needing a separate existence query:

    7_42_10a2_tinhoc_2024_1

Class and subject are folded to ASCII with a fixed Vietnamese table and
stripped to [a-z0-9].
"""

import re

from scoregate.models.common import Semester

FOLDING_TABLE: tuple[tuple[str, str], ...] = (
    ("àáạảãâầấậẩẫăằắặẳẵ", "a"),
    ("èéẹẻẽêềếệểễ", "e"),
    ("ìíịỉĩ", "i"),
    ("òóọỏõôồốộổỗơờớợởỡ", "o"),
    ("ùúụủũưừứựửữ", "u"),
    ("ỳýỵỷỹ", "y"),
    ("đ", "d"),
)

_FOLD = str.maketrans({char: ascii_ for chars, ascii_ in FOLDING_TABLE for char in chars})
_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_token(value: str) -> str:
    """Lower-case, fold diacritics and drop everything outside [a-z0-9].

    Args:
        value: Class name or subject.

    Returns:
        Normalized token, possibly empty.

    Example:
        >>> normalize_token("Tin học")
        'tinhoc'
    """
    return _NON_ALNUM.sub("", value.lower().translate(_FOLD))


def compute_id(
    teacher_id: int,
    student_id: int,
    class_name: str,
    subject: str,
    academic_year: int,
    semester: Semester,
) -> str:
    """Compute the composite id of a score record.

    Args:
        teacher_id: Owning teacher.
        student_id: Graded student.
        class_name: Class name.
        subject: Subject.
        academic_year: Academic year.
        semester: Concrete semester.

    Returns:
        ``{teacher}_{student}_{class}_{subject}_{year}_{semester}``
    """
    return (
        f"{teacher_id}_{student_id}_{normalize_token(class_name)}_"
        f"{normalize_token(subject)}_{academic_year}_{semester.value}"
    )
