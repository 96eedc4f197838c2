"""
Models Package

Exports all models for easy importing.
"""

from church_site.models.verse import FeaturedVerse
from church_site.models.event import Event
from church_site.models.study import Study
from church_site.models.gallery import GalleryPhoto, GALLERY_CATEGORIES
from church_site.models.team import TeamMember
from church_site.models.church import ChurchInfo
from church_site.models.user import User, Administrator, Worshipper

__all__ = [
    'FeaturedVerse',
    'Event',
    'Study',
    'GalleryPhoto',
    'GALLERY_CATEGORIES',
    'TeamMember',
    'ChurchInfo',
    'User',
    'Administrator',
    'Worshipper',
]
