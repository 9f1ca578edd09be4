"""tutorlog: per-student lesson and consultation records for tutors."""

__version__ = "0.1.0"
