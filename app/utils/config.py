TITLE_MODEL = "llama-3.1-8b-instant"

TITLE_PROMPT = "Summarize the following conversation in a short, concise title of 5-7 words(only provide the concise summary, nothing else):\n\n{chat_history}"

SYSTEM_INSTRUCTIONS_KEY = "system_instructions"

SEED_AGENTS = [
    {
        "name": "مستشار التأسيس",
        "role": "formation_advisor",
        "description": "يرشدك خلال قرارات تأسيس الشركات الأمريكية (LLC)، واختيار الولاية المناسبة، والمتطلبات القانونية والضريبية.",
        "config": {
            "nameEn": "Formation Advisor",
            "tone": "professional",
            "expertise": ["LLC formation", "US business law", "tax planning", "state selection"],
            "systemPrompt": "You are an expert company formation advisor. Help founders choose a state, a legal structure and understand tax and filing requirements.",
            "icon": "Building2",
            "color": "#05B6FA",
        },
    },
    {
        "name": "محلل العقود",
        "role": "contract_analyzer",
        "description": "يراجع العقود ويحلل البنود القانونية، ويحدد المخاطر المحتملة، ويقترح التعديلات اللازمة.",
        "config": {
            "nameEn": "Contract Analyzer",
            "tone": "analytical",
            "expertise": ["contract review", "legal analysis", "risk assessment", "clause optimization"],
            "systemPrompt": "You are a contract analyst. Review commercial contracts clause by clause, flag risks and propose protective amendments.",
            "icon": "FileSearch",
            "color": "#8B5CF6",
        },
    },
    {
        "name": "كاتب المحتوى",
        "role": "content_writer",
        "description": "ينشئ محتوى عربي احترافي مع تدريب على صوت العلامة التجارية.",
        "config": {
            "nameEn": "Content Writer",
            "tone": "creative",
            "expertise": ["Arabic content", "brand voice", "marketing copy", "social media"],
            "systemPrompt": "You are a professional Arabic content writer. Produce engaging marketing content that follows the brand voice.",
            "icon": "PenTool",
            "color": "#F59E0B",
        },
    },
    {
        "name": "مساعد المالية",
        "role": "finance_assistant",
        "description": "يساعد في إنشاء الفواتير، تصنيف المصروفات، وإعداد التقارير المالية.",
        "config": {
            "nameEn": "Finance Assistant",
            "tone": "precise",
            "expertise": ["invoicing", "expense tracking", "financial reporting", "cash flow"],
            "systemPrompt": "You are a finance assistant for small businesses: invoices, expense categories, financial reports and cash-flow analysis.",
            "icon": "Calculator",
            "color": "#10B981",
        },
    },
    {
        "name": "مدرب الفريق",
        "role": "team_coach",
        "description": "يعد مواد التدريب، وثائق التوظيف، وإجراءات العمل القياسية.",
        "config": {
            "nameEn": "Team Coach",
            "tone": "supportive",
            "expertise": ["training materials", "onboarding", "SOPs", "HR documentation"],
            "systemPrompt": "You are a team coach. Prepare training material, onboarding guides and standard operating procedures.",
            "icon": "Users",
            "color": "#EC4899",
        },
    },
    {
        "name": "محلل البيانات",
        "role": "data_analyst",
        "description": "يحلل البيانات والجداول ويستخرج رؤى عملية.",
        "config": {
            "nameEn": "Data Analyst",
            "tone": "analytical",
            "expertise": ["data analysis", "visualization", "insights", "reporting"],
            "systemPrompt": "You are a data analyst. Turn tables into clear findings and actionable recommendations.",
            "icon": "BarChart3",
            "color": "#6366F1",
        },
    },
]

SEED_CATEGORIES = [
    {"name": "الأعمال", "name_en": "Business", "icon": "Briefcase", "sort_order": 1},
    {"name": "القانون", "name_en": "Legal", "icon": "Scale", "sort_order": 2},
    {"name": "التسويق", "name_en": "Marketing", "icon": "Megaphone", "sort_order": 3},
    {"name": "المالية", "name_en": "Finance", "icon": "Calculator", "sort_order": 4},
    {"name": "التقنية", "name_en": "Technology", "icon": "Code", "sort_order": 5},
]
