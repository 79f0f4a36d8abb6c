from studylib.databases.mongodb import mongodb

__all__ = ["mongodb"]
