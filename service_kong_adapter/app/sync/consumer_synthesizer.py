"""
Synthesis of gateway consumers from portal subscriptions and users.

Target shape of one consumer::

    {
        "consumer": {"username": "my-app$petstore", "custom_id": "3476ghow89e7"},
        "plugins": {
            "key-auth": [{"key": "flkdfjlkdjflkdjflkdfldf"}],
            "acls": [{"group": "petstore"}]
        },
        "apiPlugins": [{"name": "rate-limiting", "config": {"hour": 100}}]
    }
"""

import asyncio
from typing import List

from shared.errors import ValidationError
from shared.logging import get_logger
from ..adapters.portal_client import PortalClient
from ..models import (
    AclGroup, Application, AuthStrategy, Consumer, ConsumerIdentity, ConsumerPlugins,
    KeyAuthCredential, OAuth2Credential, Plan, Subscription, SynthesisPolicy, User,
)
from .api_synthesizer import PORTAL_API_ID
from .plan_cache import PlanCache


class ConsumerSynthesizer:
    """Builds the full consumer list: application consumers first, then users."""

    def __init__(self, portal: PortalClient, plan_cache: PlanCache, policy: SynthesisPolicy):
        self.portal = portal
        self.plan_cache = plan_cache
        self.policy = policy
        self.logger = get_logger("sync.consumer_synthesizer")

    async def synthesize(self) -> List[Consumer]:
        plans, applications, users = await asyncio.gather(
            self.plan_cache.get_or_load(),
            self.portal.get_applications(),
            self._get_user_list(),
        )
        self.logger.debug(
            "Portal data fetched",
            plans=len(plans),
            applications=len(applications),
            users=len(users),
        )

        app_consumers, user_consumers = await asyncio.gather(
            self.application_consumers(applications, plans),
            self.user_consumers(users),
        )

        consumers = app_consumers + user_consumers
        self.logger.info(
            "Consumers synthesized",
            count=len(consumers),
            from_applications=len(app_consumers),
            from_users=len(user_consumers),
        )
        return consumers

    async def _get_user_list(self) -> List[User]:
        if not self.policy.enable_portal_api:
            return []
        return await self.portal.get_users()

    async def application_consumers(self, applications: List[Application], plans: List[Plan]) -> List[Consumer]:
        subscription_lists = await asyncio.gather(
            *(self.portal.get_subscriptions(application.id) for application in applications)
        )

        consumers: List[Consumer] = []
        for subscriptions in subscription_lists:
            for subscription in subscriptions:
                # Only approved subscriptions reach the gateway
                if not subscription.approved:
                    continue
                consumers.append(subscription_consumer(subscription, plans))
        return consumers

    async def user_consumers(self, users: List[User]) -> List[Consumer]:
        # Client secrets are only visible to the user themselves
        details = await asyncio.gather(*(self.portal.get_user(user.id) for user in users))

        consumers: List[Consumer] = []
        for user in details:
            # The email is the consumer username
            if not user.email:
                self.logger.debug("User has no email, skipping", user_id=user.id)
                continue

            if not user.has_client_credentials():
                self.logger.debug("User has no client credentials, skipping", user=user.email)
                continue

            required_group = self.policy.required_group
            if required_group and not user.has_group(required_group):
                self.logger.debug("User lacks required group, skipping", user=user.email, group=required_group)
                continue

            consumers.append(user_consumer(user))
        return consumers


def subscription_consumer(subscription: Subscription, plans: List[Plan]) -> Consumer:
    """Consumer for one approved subscription, with its plan's API plugins."""
    plugins = ConsumerPlugins(acls=[AclGroup(group=subscription.api)])

    if subscription.auth == AuthStrategy.OAUTH2.value:
        plugins.oauth2 = [OAuth2Credential(
            name=subscription.application,
            client_id=subscription.client_id,
            client_secret=subscription.client_secret,
        )]
    elif not subscription.auth or subscription.auth == AuthStrategy.KEY_AUTH.value:
        plugins.key_auth = [KeyAuthCredential(key=subscription.apikey)]
    else:
        raise ValidationError(
            f'Unknown auth strategy: {subscription.auth}, for application '
            f'"{subscription.application}", API "{subscription.api}".',
            details={"application": subscription.application, "api": subscription.api, "auth": subscription.auth}
        )

    plan = PlanCache.find(plans, subscription.plan)

    return Consumer(
        consumer=ConsumerIdentity(
            username=f"{subscription.application}${subscription.api}",
            custom_id=subscription.id,
        ),
        plugins=plugins,
        api_plugins=[plugin.model_copy(deep=True) for plugin in plan.plugins],
    )


def user_consumer(user: User) -> Consumer:
    """Consumer giving a portal user client-credentials access to the portal API."""
    return Consumer(
        consumer=ConsumerIdentity(username=user.email, custom_id=user.id),
        plugins=ConsumerPlugins(
            acls=[AclGroup(group=PORTAL_API_ID)],
            oauth2=[OAuth2Credential(
                name=user.email,
                client_id=user.client_id,
                client_secret=user.client_secret,
            )],
        ),
        api_plugins=[],
    )
