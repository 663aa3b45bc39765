# -*- coding: utf-8 -*-
"""
API роутеры Alpha Factory.

Содержит:
- auth: Аутентификация и сессии
- invoices: Счета
- paypal: Оплата через PayPal
- projects: Проекты
- admin, groups, admin_panel: Администрирование
- billing, reminders: Просрочка оплаты и напоминания
- voice: Голосовые заметки
- telegram: Webhook бота
- debug: Диагностика
- pages: Страницы кабинетов
"""
