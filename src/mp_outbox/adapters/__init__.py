"""Adapters – SQLAlchemy persistence and the aiokafka publisher."""
