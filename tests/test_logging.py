"""Tests for credential masking in log output."""

import logging

from deploy_pilot.utils.logging_utils import SecretMaskingFilter


def make_record(msg, *args):
    return logging.LogRecord("deploy_pilot", logging.INFO, __file__, 1, msg, args, None)


class TestSecretMaskingFilter:
    def test_masks_message_and_arguments(self):
        masking = SecretMaskingFilter(["203.0.113.7", "deployer"])
        record = make_record("Connecting to %s as %s", "203.0.113.7", "deployer")

        assert masking.filter(record)
        assert record.getMessage() == "Connecting to *** as ***"

    def test_longer_secret_masked_whole(self):
        masking = SecretMaskingFilter(["app", "app.example.com"])
        assert masking.mask("probing app.example.com") == "probing ***"

    def test_untouched_records_keep_arguments(self):
        masking = SecretMaskingFilter(["secret"])
        record = make_record("Uploading %s", "release.tar.gz")

        masking.filter(record)
        assert record.args == ("release.tar.gz",)

    def test_empty_values_are_ignored(self):
        masking = SecretMaskingFilter(["", None])
        record = make_record("nothing to hide")
        masking.filter(record)
        assert record.getMessage() == "nothing to hide"

    def test_handler_output_is_masked(self, caplog):
        masking = SecretMaskingFilter(["-----BEGIN KEY-----"])
        logger = logging.getLogger("deploy_pilot.test")
        caplog.handler.addFilter(masking)
        try:
            with caplog.at_level(logging.INFO, logger="deploy_pilot.test"):
                logger.info("key is %s", "-----BEGIN KEY-----")
        finally:
            caplog.handler.removeFilter(masking)

        assert "BEGIN KEY" not in caplog.text
        assert "key is ***" in caplog.text
