from studylib.middlewares.sentry import init_sentry

__all__ = ["init_sentry"]
