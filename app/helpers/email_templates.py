from html import escape

VERIFICATION_TEXT = {
    "en": {
        "subject": "Verify Your Account",
        "title": "Account Verification",
        "greeting": "Hello {name},",
        "message": "Thank you for registering! Please verify your account using the code below:",
        "code_label": "Verification Code:",
        "expires": "This code expires in 10 minutes.",
        "ignore": "If you did not create an account, please ignore this email.",
    },
    "ar": {
        "subject": "تحقق من حسابك",
        "title": "التحقق من الحساب",
        "greeting": "مرحباً {name}،",
        "message": "شكراً للتسجيل! يرجى التحقق من حسابك باستخدام الرمز أدناه:",
        "code_label": "رمز التحقق:",
        "expires": "تنتهي صلاحية هذا الرمز خلال 10 دقائق.",
        "ignore": "إذا لم تقم بإنشاء حساب، يرجى تجاهل هذا البريد الإلكتروني.",
    },
    "ckb": {
        "subject": "هەژمارەکەت بسەلمێنە",
        "title": "سەلماندنی هەژمار",
        "greeting": "سڵاو {name}،",
        "message": "سوپاس بۆ تۆمارکردن! تکایە هەژمارەکەت بسەلمێنە بە بەکارهێنانی کۆدی خوارەوە:",
        "code_label": "کۆدی سەلماندن:",
        "expires": "ئەم کۆدە لە ماوەی 10 خولەکدا بەسەردەچێت.",
        "ignore": "ئەگەر هەژمارێکت دروست نەکردووە، تکایە ئەم ئیمەیڵە پشتگوێ بخە.",
    },
}

PASSWORD_RESET_TEXT = {
    "en": {
        "subject": "Reset Your Password",
        "title": "Password Reset",
        "greeting": "Hello {name},",
        "message": "We received a request to reset your password. Click the button below to choose a new one:",
        "button": "Reset Password",
        "expires": "This link expires in 1 hour.",
        "ignore": "If you did not request a password reset, please ignore this email.",
    },
    "ar": {
        "subject": "إعادة تعيين كلمة المرور",
        "title": "إعادة تعيين كلمة المرور",
        "greeting": "مرحباً {name}،",
        "message": "تلقينا طلباً لإعادة تعيين كلمة المرور. انقر على الزر أدناه لاختيار كلمة مرور جديدة:",
        "button": "إعادة تعيين كلمة المرور",
        "expires": "تنتهي صلاحية هذا الرابط خلال ساعة واحدة.",
        "ignore": "إذا لم تطلب إعادة تعيين كلمة المرور، يرجى تجاهل هذا البريد الإلكتروني.",
    },
    "ckb": {
        "subject": "گۆڕینی وشەی نهێنی",
        "title": "گۆڕینی وشەی نهێنی",
        "greeting": "سڵاو {name}،",
        "message": "داواکارییەکمان پێگەیشت بۆ گۆڕینی وشەی نهێنییەکەت. کلیک لە دوگمەی خوارەوە بکە:",
        "button": "گۆڕینی وشەی نهێنی",
        "expires": "ئەم بەستەرە لە ماوەی 1 کاتژمێردا بەسەردەچێت.",
        "ignore": "ئەگەر داوای گۆڕینی وشەی نهێنیت نەکردووە، تکایە ئەم ئیمەیڵە پشتگوێ بخە.",
    },
}

STYLE = """
body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
.container { max-width: 600px; margin: 0 auto; padding: 20px; }
.header { background-color: #4f46e5; color: white; padding: 20px; text-align: center; border-radius: 8px 8px 0 0; }
.content { background-color: #f9fafb; padding: 30px; border-radius: 0 0 8px 8px; }
.code { font-size: 32px; font-weight: bold; color: #4f46e5; letter-spacing: 5px; text-align: center; }
.button { display: inline-block; background-color: #4f46e5; color: white; padding: 12px 24px; border-radius: 6px; text-decoration: none; }
.footer { text-align: center; margin-top: 20px; color: #6b7280; font-size: 14px; }
"""

def _layout(title: str, body: str, lang: str) -> str:
    direction = "ltr" if lang == "en" else "rtl"
    return f"""<!DOCTYPE html>
<html dir="{direction}">
  <head><meta charset="utf-8"><style>{STYLE}</style></head>
  <body>
    <div class="container">
      <div class="header"><h1>{title}</h1></div>
      <div class="content">{body}</div>
    </div>
  </body>
</html>"""

def account_verification(name: str, code: str, lang: str = "en"):
    """Returns (subject, html)."""
    t = VERIFICATION_TEXT.get(lang, VERIFICATION_TEXT["en"])
    body = (
        f"<p>{t['greeting'].format(name=escape(name))}</p>"
        f"<p>{t['message']}</p>"
        f"<p>{t['code_label']}</p>"
        f"<div class=\"code\">{escape(code)}</div>"
        f"<p>{t['expires']}</p>"
        f"<div class=\"footer\">{t['ignore']}</div>"
    )
    return t["subject"], _layout(t["title"], body, lang)

def password_reset(name: str, reset_link: str, lang: str = "en"):
    """Returns (subject, html)."""
    t = PASSWORD_RESET_TEXT.get(lang, PASSWORD_RESET_TEXT["en"])
    body = (
        f"<p>{t['greeting'].format(name=escape(name))}</p>"
        f"<p>{t['message']}</p>"
        f"<p style=\"text-align:center\"><a class=\"button\" href=\"{escape(reset_link)}\">{t['button']}</a></p>"
        f"<p>{t['expires']}</p>"
        f"<div class=\"footer\">{t['ignore']}</div>"
    )
    return t["subject"], _layout(t["title"], body, lang)
