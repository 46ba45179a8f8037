#!/usr/bin/env python3
import os
import sys
import unittest
from unittest.mock import Mock, patch

import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from alertbot.discord_client import BotUser, Channel, DiscordClient, SentMessage
from alertbot.errors import DiscordAPIError, LoginError
from alertbot.services import add_severity_reactions


def make_response(status=200, body=None, reason='OK', headers=None):
    resp = Mock()
    resp.headers = headers or {}
    resp.status_code = status
    resp.ok = 200 <= status < 400
    resp.reason = reason
    resp.content = b'' if body is None else b'{}'
    if body is None:
        resp.json.side_effect = ValueError('no body')
    else:
        resp.json.return_value = body
    return resp


class DiscordClientTestCase(unittest.TestCase):
    def setUp(self):
        self.session = Mock()
        self.client = DiscordClient('token-abc', base_url='https://discord.test/api/v10/',
                                    timeout=5, session=self.session)

    def last_call(self):
        return self.session.request.call_args


class TestLogin(DiscordClientTestCase):
    def test_login_marks_ready(self):
        self.session.request.side_effect = [
            make_response(body={'id': '999', 'username': 'cv-alert-bot', 'discriminator': '0'}),
            make_response(body=[{'id': '1'}, {'id': '2'}]),
        ]
        self.assertFalse(self.client.is_ready())
        self.client.login()

        self.assertTrue(self.client.is_ready())
        self.assertEqual(self.client.user.tag, 'cv-alert-bot')
        self.assertEqual(self.client.guild_count, 2)
        first = self.session.request.call_args_list[0]
        self.assertEqual(first.args, ('GET', 'https://discord.test/api/v10/users/@me'))
        self.assertEqual(first.kwargs['headers']['Authorization'], 'Bot token-abc')
        self.assertEqual(first.kwargs['timeout'], 5)

    def test_guilds_are_paginated(self):
        page = [{'id': str(i)} for i in range(200)]
        self.session.request.side_effect = [
            make_response(body={'id': '999', 'username': 'bot'}),
            make_response(body=page),
            make_response(body=[{'id': '200'}]),
        ]
        self.client.login()
        self.assertEqual(self.client.guild_count, 201)
        self.assertEqual(self.last_call().kwargs['params'], {'limit': 200, 'after': '199'})

    def test_invalid_token(self):
        self.session.request.return_value = make_response(401, {'message': '401: Unauthorized', 'code': 0}, 'Unauthorized')
        with self.assertRaises(LoginError):
            self.client.login()
        self.assertFalse(self.client.is_ready())

    def test_network_failure(self):
        self.session.request.side_effect = requests.ConnectionError('sem rede')
        with self.assertRaises(LoginError):
            self.client.login()

    def test_missing_token(self):
        with self.assertRaises(LoginError):
            DiscordClient(None, session=self.session).login()
        self.session.request.assert_not_called()


class TestOperations(DiscordClientTestCase):
    def test_fetch_channel(self):
        self.session.request.return_value = make_response(body={'id': '123', 'name': 'alertas', 'type': 0})
        channel = self.client.fetch_channel('123')
        self.assertEqual((channel.id, channel.name), ('123', 'alertas'))
        self.assertEqual(self.last_call().args, ('GET', 'https://discord.test/api/v10/channels/123'))

    def test_fetch_unknown_channel_raises_code(self):
        self.session.request.return_value = make_response(404, {'message': 'Unknown Channel', 'code': 10003}, 'Not Found')
        with self.assertRaises(DiscordAPIError) as ctx:
            self.client.fetch_channel('123')
        self.assertEqual(ctx.exception.code, 10003)
        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(str(ctx.exception), 'Unknown Channel')

    def test_error_without_json_body(self):
        self.session.request.return_value = make_response(502, None, 'Bad Gateway')
        with self.assertRaises(DiscordAPIError) as ctx:
            self.client.fetch_channel('123')
        self.assertIsNone(ctx.exception.code)
        self.assertEqual(str(ctx.exception), 'Bad Gateway')

    def test_send_message(self):
        self.session.request.return_value = make_response(body={'id': '555', 'channel_id': '123'})
        sent = self.client.send_message(Channel({'id': '123'}), {'content': 'oi'})
        self.assertEqual((sent.id, sent.channel_id), ('555', '123'))
        call = self.last_call()
        self.assertEqual(call.args, ('POST', 'https://discord.test/api/v10/channels/123/messages'))
        self.assertEqual(call.kwargs['json'], {'content': 'oi'})

    def test_add_reaction_encodes_emoji(self):
        self.session.request.return_value = make_response(204)
        self.client.add_reaction(SentMessage({'id': '555', 'channel_id': '123'}), '🚨')
        self.assertEqual(
            self.last_call().args,
            ('PUT', 'https://discord.test/api/v10/channels/123/messages/555/reactions/%F0%9F%9A%A8/@me'),
        )

    def test_unauthorized_after_login_drops_readiness(self):
        self.client._ready = True
        self.session.request.return_value = make_response(401, {'message': '401: Unauthorized', 'code': 0}, 'Unauthorized')
        with self.assertRaises(DiscordAPIError):
            self.client.fetch_channel('123')
        self.assertFalse(self.client.is_ready())


class TestRateLimit(DiscordClientTestCase):
    def rate_limited(self, retry_after=0.3, headers=None):
        return make_response(429, {'message': 'You are being rate limited.', 'retry_after': retry_after, 'global': False},
                             'Too Many Requests', headers=headers)

    @patch('alertbot.discord_client.time.sleep')
    def test_retries_once_after_429(self, sleep):
        self.session.request.side_effect = [self.rate_limited(0.3), make_response(204)]
        self.client.add_reaction(SentMessage({'id': '555', 'channel_id': '123'}), '👀')
        self.assertEqual(self.session.request.call_count, 2)
        sleep.assert_called_once_with(0.3)

    @patch('alertbot.discord_client.time.sleep')
    def test_critical_reactions_survive_rate_limit(self, sleep):
        self.session.request.side_effect = [make_response(204), self.rate_limited(0.3), make_response(204)]
        added, errors = add_severity_reactions(
            self.client, SentMessage({'id': '555', 'channel_id': '123'}), 'CRITICAL_ALERT')
        self.assertEqual(added, ['🚨', '👀'])
        self.assertEqual(errors, [])

    @patch('alertbot.discord_client.time.sleep')
    def test_wait_is_capped_by_timeout(self, sleep):
        self.session.request.side_effect = [self.rate_limited(60), make_response(204)]
        self.client.add_reaction(SentMessage({'id': '555', 'channel_id': '123'}), '✅')
        sleep.assert_called_once_with(5)

    @patch('alertbot.discord_client.time.sleep')
    def test_header_used_when_body_has_no_retry_after(self, sleep):
        first = make_response(429, {'message': 'You are being rate limited.'}, 'Too Many Requests',
                              headers={'X-RateLimit-Reset-After': '0.75'})
        self.session.request.side_effect = [first, make_response(204)]
        self.client.add_reaction(SentMessage({'id': '555', 'channel_id': '123'}), '✅')
        sleep.assert_called_once_with(0.75)

    @patch('alertbot.discord_client.time.sleep')
    def test_second_429_is_raised(self, sleep):
        self.session.request.side_effect = [self.rate_limited(0.1), self.rate_limited(0.1)]
        with self.assertRaises(DiscordAPIError) as ctx:
            self.client.add_reaction(SentMessage({'id': '555', 'channel_id': '123'}), '✅')
        self.assertEqual(ctx.exception.status, 429)
        self.assertEqual(self.session.request.call_count, 2)


class TestBotUser(unittest.TestCase):
    def test_legacy_discriminator_tag(self):
        self.assertEqual(BotUser({'id': 1, 'username': 'bot', 'discriminator': '4242'}).tag, 'bot#4242')


if __name__ == '__main__':
    unittest.main()
