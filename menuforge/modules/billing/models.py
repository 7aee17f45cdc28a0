# Stripe billing
# No tables of its own: payment state is written onto `profiles`
# (stripe_customer_id, stripe_subscription_id, subscription_status,
# has_activated, menu_credits). See modules/profiles/models.py.

"""
Checkout session metadata contract (read back by the webhook):
- userId: Supabase user id of the buyer
- type: "activation" | "credits"
- quantity: number of credits purchased (credits only, as a string)

Stripe products, looked up by name and created on first use:
- "MenuForge Activation" - one-time activation, grants the initial credits
- "MenuForge Credit" - one generation credit
- "MenuForge Pro" - legacy monthly subscription
"""
