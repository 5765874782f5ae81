"""
Sorting and list utilities
==========================

Small, explicit primitives used by DAWN.

Included:
- Merge Sort (stable in both directions, O(n log n)). Rankings rely on the
  stability: entities with equal metric keep their input order.
- Intersection of two sorted lists (two-pointer technique)
"""

from __future__ import annotations
from typing import List, Callable, TypeVar

T = TypeVar("T")

def merge_sort(arr: List[T], key: Callable[[T], object] = lambda x: x, reverse: bool = False) -> List[T]:
    """Stable merge sort."""
    if len(arr) <= 1:
        return arr[:]
    mid = len(arr) // 2
    left = merge_sort(arr[:mid], key=key, reverse=reverse)
    right = merge_sort(arr[mid:], key=key, reverse=reverse)
    return _merge(left, right, key=key, reverse=reverse)

def _merge(left: List[T], right: List[T], key: Callable[[T], object], reverse: bool) -> List[T]:
    out: List[T] = []
    # i and j are pointers into each sorted list
    i = j = 0
    while i < len(left) and j < len(right):
        a, b = key(left[i]), key(right[j])
        # on ties the left element wins, whatever the direction
        take_left = (a >= b) if reverse else (a <= b)
        if take_left:
            out.append(left[i]); i += 1
        else:
            out.append(right[j]); j += 1
    out.extend(left[i:])
    out.extend(right[j:])
    return out

def intersect_sorted(a: List[int], b: List[int]) -> List[int]:
    """Two-pointer intersection for sorted integer lists."""
    i = j = 0
    out: List[int] = []
    while i < len(a) and j < len(b):
        if a[i] == b[j]:
            out.append(a[i]); i += 1; j += 1
        elif a[i] < b[j]:
            i += 1
        else:
            j += 1
    return out
