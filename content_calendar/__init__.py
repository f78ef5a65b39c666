"""Weekly content calendar package.

The FastAPI application lives in :mod:`content_calendar.app`; the week
bucketing helpers in :mod:`content_calendar.weeks` have no dependency on the
web layer and can be imported on their own.
"""
