"""
Configuration module for the barter engine and its Lambda handlers.
Loads all environment variables needed by the hub.
"""
import os


class Config:
    """Centralized configuration from environment variables."""

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # DynamoDB Tables
    MEMBERS_TABLE = os.environ.get('MEMBERS_TABLE', 'barterhub-members')
    ASSETS_TABLE = os.environ.get('ASSETS_TABLE', 'barterhub-assets')
    TASKS_TABLE = os.environ.get('TASKS_TABLE', 'barterhub-tasks')
    COUNTERS_TABLE = os.environ.get('COUNTERS_TABLE', 'barterhub-counters')

    # Assignment
    DAILY_TASK_QUOTA = int(os.environ.get('DAILY_TASK_QUOTA', '5'))
    ASSIGN_ATTEMPTS = int(os.environ.get('ASSIGN_ATTEMPTS', '3'))

    # Settlement
    APPROVAL_CREDIT = int(os.environ.get('APPROVAL_CREDIT', '10'))
    DEFAULT_APPROVAL_RATING = int(os.environ.get('DEFAULT_APPROVAL_RATING', '5'))
    DEFAULT_REJECTION_FEEDBACK = os.environ.get(
        'DEFAULT_REJECTION_FEEDBACK', 'Please revise and resubmit.'
    )

    # Asset lifecycle
    INACTIVITY_HOURS = int(os.environ.get('INACTIVITY_HOURS', '48'))
    UNLOCK_DAYS = int(os.environ.get('UNLOCK_DAYS', '7'))

    # Inactivity penalty
    SUBMISSION_GRACE_HOURS = int(os.environ.get('SUBMISSION_GRACE_HOURS', '24'))
    PENALTY_PER_EVENT = int(os.environ.get('PENALTY_PER_EVENT', '5'))
    WEEKLY_PENALTY_CAP = int(os.environ.get('WEEKLY_PENALTY_CAP', '10'))
    PENALTY_WINDOW_DAYS = int(os.environ.get('PENALTY_WINDOW_DAYS', '7'))

    # Registration
    SIGNUP_CREDITS = int(os.environ.get('SIGNUP_CREDITS', '5'))


config = Config()
