from unittest.mock import MagicMock, patch
from app.services.notification_service import send_email

ENABLED = {
    "admin_email": "admin@campus.edu",
    "notifications": {"email_enabled": True},
}

@patch("app.services.notification_service.smtplib.SMTP")
def test_send_email_mocked(mock_smtp_cls):
    mock_server = MagicMock()
    mock_smtp_cls.return_value = mock_server

    with patch("app.services.notification_service.get_campus_config", return_value=ENABLED), \
         patch("app.services.notification_service.SMTP_USERNAME", "user"), \
         patch("app.services.notification_service.SMTP_PASSWORD", "pass"):

        result = send_email("Seminar Hall booked", "Body", "club@campus.edu")

        assert result is True
        mock_smtp_cls.assert_called_once()
        mock_server.starttls.assert_called_once()
        mock_server.login.assert_called_with("user", "pass")
        from_addr, to_addr, _ = mock_server.sendmail.call_args.args
        assert (from_addr, to_addr) == ("user", "club@campus.edu")

@patch("app.services.notification_service.smtplib.SMTP")
def test_send_email_defaults_to_admin(mock_smtp_cls):
    mock_server = MagicMock()
    mock_smtp_cls.return_value = mock_server

    with patch("app.services.notification_service.get_campus_config", return_value=ENABLED), \
         patch("app.services.notification_service.SMTP_USERNAME", "user"), \
         patch("app.services.notification_service.SMTP_PASSWORD", "pass"):
        assert send_email("Subject", "Body") is True

    assert mock_server.sendmail.call_args.args[1] == "admin@campus.edu"

@patch("app.services.notification_service.smtplib.SMTP")
def test_send_email_disabled(mock_smtp_cls):
    with patch("app.services.notification_service.get_campus_config",
               return_value={"notifications": {"email_enabled": False}}):
        assert send_email("Subject", "Body", "club@campus.edu") is False
    mock_smtp_cls.assert_not_called()

@patch("app.services.notification_service.smtplib.SMTP")
def test_send_email_failure_is_reported(mock_smtp_cls):
    mock_smtp_cls.side_effect = OSError("connection refused")

    with patch("app.services.notification_service.get_campus_config", return_value=ENABLED), \
         patch("app.services.notification_service.SMTP_USERNAME", "user"), \
         patch("app.services.notification_service.SMTP_PASSWORD", "pass"):
        assert send_email("Subject", "Body", "club@campus.edu") is False
