"""Transactional email helpers.

Templates live under ``api/templates/emails`` as ``<name>.txt`` and
``<name>.html`` pairs; the text part is the body and the HTML part is
attached as an alternative.
"""

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def send_templated_email(subject, template_name, context, recipient_list, from_email=None):
    """Render ``template_name`` with ``context`` and send it to ``recipient_list``.

    Delivery errors propagate; callers decide whether a failed send matters.
    """
    text_body = render_to_string(f"{template_name}.txt", context)
    html_body = render_to_string(f"{template_name}.html", context)

    email = EmailMultiAlternatives(
        subject,
        text_body,
        from_email or settings.DEFAULT_FROM_EMAIL,
        recipient_list,
    )
    email.attach_alternative(html_body, "text/html")
    sent = email.send()
    logger.debug("Sent %r (%s) to %d recipient(s)", subject, template_name, len(recipient_list))
    return sent
