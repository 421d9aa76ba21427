"""
Paystack webhook intake.

- views.paystack_webhook: HTTP endpoint (signature checked by PaymentService)
- handlers: event type -> handler registry
- logger.log_webhook_delivery: raw delivery log (WebhookLog)

Modules are imported directly; this package imports nothing so that
payments.services can depend on the handlers without a cycle.
"""
