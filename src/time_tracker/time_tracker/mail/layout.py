from __future__ import annotations

from datetime import date
from typing import Optional

BRANDED_EMAIL_TEMPLATE = """
        <!DOCTYPE html>
        <html>
        <head>
          <meta charset="utf-8">
          <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f5f5f5;">
          <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff;">

            <!-- Header with Gradient -->
            <div style="background: linear-gradient(90deg, #2596BE 0%, #102430 100%); padding: 40px 20px; text-align: center;">
              <h1 style="color: white; margin: 0; font-size: 32px; font-weight: bold;">OSO</h1>
              <p style="color: rgba(255,255,255,0.9); margin: 10px 0 0 0; font-size: 14px;">Human Resources</p>
            </div>

            <!-- Content -->
            <div style="padding: 40px 30px; line-height: 1.8; color: #374151; font-size: 15px;">
              <div style="white-space: pre-line;">
{body}
              </div>
            </div>

            <!-- Footer -->
            <div style="background-color: #f9fafb; padding: 30px; text-align: center; border-top: 1px solid #e5e7eb;">
              <p style="margin: 0 0 10px 0; color: #9ca3af; font-size: 13px;">
                Diese E-Mail wurde automatisch generiert.
              </p>
              <p style="margin: 0; color: #9ca3af; font-size: 13px;">
                © {year} OSO. Alle Rechte vorbehalten.
              </p>
            </div>

          </div>
        </body>
        </html>
      """


def render_branded_html(body: str, *, today: Optional[date] = None) -> str:
    """Wrap a plain-text body into the fixed OSO HR email layout."""
    year = (today or date.today()).year
    return BRANDED_EMAIL_TEMPLATE.replace("{year}", str(year)).replace("{body}", body)
