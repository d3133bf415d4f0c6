"""
Centralized Prompt Management for Cambodia Lending Intelligence.

All analysis prompts are stored here and can be:
- Retrieved via API
- Modified at runtime
- Reset to defaults

Each prompt carries execution options (title, model alias, output budget)
that the executor receives alongside the rendered text. Titles may use the
same {variables} as the user template.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CAMBODIA_ANALYST = (
    "You are a senior analyst for a Cambodia-focused private lending and wealth "
    "advisory fund. Write practical, specific analysis grounded in Cambodian "
    "market conditions, regulation (NBC, Ministry of Commerce, GDT) and the "
    "USD/KHR dual-currency economy. Use clear section headings."
)

CREDIT_OFFICER = (
    "You are a senior credit and compliance officer at a Cambodia private "
    "lending fund. Follow National Bank of Cambodia regulations, the Cambodia "
    "AML/CFT Law and CAFIU guidance. Be precise, conservative and action-oriented."
)

LOAN_SERVICER = (
    "You are a loan servicing manager at a Cambodia private lending fund. "
    "Balance recovery with borrower relationships, respect local legal "
    "procedures and cultural norms, and give concrete next actions."
)

# Default prompts - these are the system defaults
DEFAULT_PROMPTS: Dict[str, Dict[str, Any]] = {
    # =========================================================================
    # BUSINESS WEALTH
    # =========================================================================
    "business_opportunity": {
        "id": "business_opportunity",
        "name": "Business Opportunity",
        "description": "Sector opportunity analysis for a business investment",
        "category": "business",
        "variables": ["sector", "investment", "timeframe"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA BUSINESS OPPORTUNITY ANALYSIS

Business Parameters:
- Sector: {sector}
- Investment Budget: {investment}
- Time Horizon: {timeframe}

Cover:
1. Market opportunity: size, growth, gaps and customer segments in {sector}
2. Business model: optimal structures, revenue streams, supply chain
3. Financial projections: startup costs, break-even, ROI, IRR and payback
4. Regulatory framework: registration, foreign ownership, tax incentives, labor law
5. Risks and mitigation: market, execution, political and currency risks
6. Implementation roadmap: milestones, partners, KPIs

Focus on practical, actionable business intelligence for wealth building in Cambodia.""",
        "options": {
            "title": "Cambodia Business Opportunity - {sector}",
            "force_model": "primary",
            "max_output_tokens": 10000,
            "reasoning_effort": "high",
            "verbosity": "high",
        },
    },

    "business_market_entry": {
        "id": "business_market_entry",
        "name": "Market Entry Strategy",
        "description": "Market entry plan for a business type and target market",
        "category": "business",
        "variables": ["business_type", "target_market", "strategy"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA MARKET ENTRY STRATEGY ANALYSIS

Market Entry Parameters:
- Business Type: {business_type}
- Target Market: {target_market}
- Entry Strategy: {strategy}

Cover:
1. Market intelligence: segmentation, customer behavior, seasonality, channels
2. Competitive analysis: leaders, market shares, barriers to entry
3. Entry strategy: localization, partnerships, customer acquisition, phasing
4. Operational setup: location, staffing, suppliers, systems
5. Financial planning: entry costs, working capital, ramp-up, funding sources
6. Success factors: KPIs, milestones, contingency plans

Provide actionable market entry intelligence with specific recommendations.""",
        "options": {
            "title": "Cambodia Market Entry Strategy - {business_type}",
            "force_model": "primary",
            "max_output_tokens": 8000,
            "reasoning_effort": "high",
            "verbosity": "high",
        },
    },

    "business_scaling": {
        "id": "business_scaling",
        "name": "Scaling Strategy",
        "description": "Growth and expansion strategy for an existing business",
        "category": "business",
        "variables": ["current_business", "growth_targets", "expansion"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA BUSINESS SCALING STRATEGY

Scaling Parameters:
- Current Business: {current_business}
- Growth Targets: {growth_targets}
- Expansion Plans: {expansion}

Cover:
1. Growth assessment: current position, capacity, scalability constraints
2. Expansion options: geographic, product, segment and regional (ASEAN) growth
3. Operational scaling: processes, automation, talent, systems
4. Financial strategy: capital needs, financing options, unit economics
5. Risk management: execution, market and concentration risks
6. Roadmap: phased plan with milestones and metrics

Deliver a concrete scaling plan for the Cambodian market.""",
        "options": {
            "title": "Cambodia Business Scaling Strategy",
            "force_model": "primary",
            "max_output_tokens": 8000,
            "reasoning_effort": "high",
            "verbosity": "high",
        },
    },

    "business_trends": {
        "id": "business_trends",
        "name": "Business Trends",
        "description": "Current Cambodian business environment and trends",
        "category": "business",
        "variables": [],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA BUSINESS TRENDS & INTELLIGENCE

Provide a current briefing on:
1. Economic environment: GDP growth, inflation, exchange rate, FDI flows
2. Hot sectors: manufacturing, agriculture processing, tourism, digital economy
3. Policy changes: investment law, tax incentives, SEZ developments
4. Consumer trends: urbanization, middle class, digital payments
5. Regional dynamics: ASEAN integration, China and Vietnam competition
6. Opportunities for the next 12-24 months

Keep the briefing concise and investor-focused.""",
        "options": {
            "title": "Cambodia Business Trends & Intelligence",
            "force_model": "fast",
            "max_output_tokens": 6000,
            "reasoning_effort": "medium",
            "verbosity": "high",
        },
    },

    "business_sector_analysis": {
        "id": "business_sector_analysis",
        "name": "Business Sector Analysis",
        "description": "Deep dive into one business sector",
        "category": "business",
        "variables": ["sector"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA {sector} SECTOR ANALYSIS

Cover:
1. Sector overview: size, growth, key players and value chain
2. Investment opportunities: niches, entry points, typical ticket sizes
3. Returns: margins, ROI ranges, payback periods
4. Regulation: licences, foreign ownership, incentives
5. Risks: competition, inputs, policy, currency
6. Recommendations for investors entering {sector}""",
        "options": {
            "title": "Cambodia {sector} Sector Analysis",
            "force_model": "primary",
            "max_output_tokens": 8000,
            "reasoning_effort": "high",
            "verbosity": "high",
        },
    },

    # =========================================================================
    # REAL ESTATE
    # =========================================================================
    "property_investment": {
        "id": "property_investment",
        "name": "Property Investment",
        "description": "Property investment analysis for a location and budget",
        "category": "real_estate",
        "variables": ["location", "budget", "strategy"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA REAL ESTATE INVESTMENT ANALYSIS

Investment Parameters:
- Location: {location}
- Budget: {budget}
- Strategy: {strategy}

Cover:
1. Market analysis: prices per sqm, growth, supply pipeline in {location}
2. Investment options suited to the budget and strategy
3. Legal framework: foreign ownership rules, strata titles, hard vs soft titles
4. Financial projections: yields, appreciation, costs, exit values
5. Risks: title disputes, oversupply, liquidity, currency
6. Action plan: due diligence steps and timeline""",
        "options": {
            "title": "Cambodia Real Estate Investment Analysis - {location}",
            "force_model": "primary",
            "max_output_tokens": 8000,
            "reasoning_effort": "high",
            "verbosity": "high",
        },
    },

    "rental_yield": {
        "id": "rental_yield",
        "name": "Rental Yield",
        "description": "Rental yield analysis for a property type and location",
        "category": "real_estate",
        "variables": ["property_type", "location", "yield_range"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA RENTAL YIELD ANALYSIS

Property Parameters:
- Property Type: {property_type}
- Location: {location}
- Typical Gross Yield Band: {yield_range}

Cover:
1. Rental market: demand drivers, tenant profiles, vacancy rates
2. Yield analysis: gross vs net yield, occupancy and seasonality
3. Operating costs: management, maintenance, taxes
4. Comparison with other property types and locations
5. Yield optimization strategies and risks""",
        "options": {
            "title": "Cambodia Rental Yield Analysis - {property_type}",
            "force_model": "fast",
            "max_output_tokens": 6000,
            "reasoning_effort": "medium",
            "verbosity": "high",
        },
    },

    "development_opportunity": {
        "id": "development_opportunity",
        "name": "Development Opportunity",
        "description": "Feasibility of a property development project",
        "category": "real_estate",
        "variables": ["project_type", "location", "investment", "feasibility_score"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA PROPERTY DEVELOPMENT ANALYSIS

Development Parameters:
- Project Type: {project_type}
- Location: {location}
- Investment: {investment}
- Preliminary Feasibility Score: {feasibility_score}/100

Cover:
1. Site and market: demand, absorption rates, competing projects
2. Development process: permits, construction, contractors, timeline
3. Financial feasibility: costs, sales or lease revenue, IRR, funding structure
4. Legal structure: land title, joint ventures, foreign ownership
5. Risks: construction delays, cost overruns, oversupply, presales
6. Go / no-go recommendation with conditions""",
        "options": {
            "title": "Cambodia Development Analysis - {project_type}",
            "force_model": "primary",
            "max_output_tokens": 10000,
            "reasoning_effort": "high",
            "verbosity": "high",
        },
    },

    "real_estate_market_update": {
        "id": "real_estate_market_update",
        "name": "Real Estate Market Update",
        "description": "Current Cambodian property market briefing",
        "category": "real_estate",
        "variables": [],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA REAL ESTATE MARKET UPDATE

Provide a current briefing on:
1. Phnom Penh, Siem Reap and Sihanoukville price and rental trends
2. Supply pipeline and absorption in condos, landed homes, offices and retail
3. Policy and regulatory changes affecting foreign buyers
4. Financing conditions and mortgage availability
5. Best opportunities and areas to avoid over the next 12 months""",
        "options": {
            "title": "Cambodia Real Estate Market Update",
            "force_model": "fast",
            "max_output_tokens": 6000,
            "reasoning_effort": "medium",
            "verbosity": "high",
        },
    },

    # =========================================================================
    # INVESTMENT WEALTH
    # =========================================================================
    "portfolio_strategy": {
        "id": "portfolio_strategy",
        "name": "Portfolio Strategy",
        "description": "Investment portfolio strategy for an investor profile",
        "category": "investment",
        "variables": ["investment_amount", "risk_tolerance", "time_horizon", "objectives", "strategy_name"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA INVESTMENT PORTFOLIO STRATEGY

Investor Profile:
- Investment Amount: {investment_amount}
- Risk Tolerance: {risk_tolerance}
- Time Horizon: {time_horizon}
- Objectives: {objectives}
- Reference Strategy: {strategy_name}

Cover:
1. Asset allocation across CSX equities, government bonds, deposits, real estate and PE
2. Specific instruments and expected returns
3. Currency strategy for USD and KHR exposure
4. Risk management: liquidity, political, credit and currency risk
5. Rebalancing rules and review schedule
6. Tax considerations and implementation steps""",
        "options": {
            "title": "Cambodia Portfolio Strategy Analysis",
            "force_model": "primary",
            "max_output_tokens": 10000,
            "reasoning_effort": "high",
            "verbosity": "high",
        },
    },

    "stock_investment": {
        "id": "stock_investment",
        "name": "Stock Investment",
        "description": "Cambodia Securities Exchange stock analysis",
        "category": "investment",
        "variables": ["sector", "company", "investment_size"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA STOCK INVESTMENT ANALYSIS

Investment Parameters:
- Sector: {sector}
- Company: {company}
- Investment Size: {investment_size}

Cover:
1. Company and sector fundamentals: earnings, valuation, dividends
2. CSX market structure: liquidity, trading hours, settlement
3. Valuation: P/E, dividend yield, peer comparison
4. Risks: liquidity, governance, regulatory and currency
5. Entry and exit strategy with position sizing""",
        "options": {
            "title": "Cambodia Stock Investment Analysis - {sector}",
            "force_model": "primary",
            "max_output_tokens": 8000,
            "reasoning_effort": "high",
            "verbosity": "high",
        },
    },

    "bond_investment": {
        "id": "bond_investment",
        "name": "Bond Investment",
        "description": "Government or corporate bond analysis",
        "category": "investment",
        "variables": ["bond_type", "maturity", "amount", "currency", "yield_range"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA BOND INVESTMENT ANALYSIS

Bond Parameters:
- Bond Type: {bond_type}
- Maturity: {maturity}
- Amount: {amount}
- Currency: {currency}
- Indicative Yield: {yield_range}

Cover:
1. Yield analysis against deposits and regional bonds
2. Credit quality and sovereign risk
3. Currency and interest rate risk
4. Liquidity and secondary market access
5. Laddering and portfolio fit recommendations""",
        "options": {
            "title": "Cambodia Bond Investment Analysis",
            "force_model": "fast",
            "max_output_tokens": 7000,
            "reasoning_effort": "medium",
            "verbosity": "high",
        },
    },

    "investment_market_update": {
        "id": "investment_market_update",
        "name": "Financial Markets Update",
        "description": "Current Cambodian financial markets briefing",
        "category": "investment",
        "variables": [],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA FINANCIAL MARKETS UPDATE

Provide a current briefing on:
1. CSX performance, listings and liquidity
2. Government bond issuance and yields
3. Banking sector growth, deposit rates and NPL trends
4. Monetary policy, exchange rate and inflation
5. Investment opportunities and risks for the next quarter""",
        "options": {
            "title": "Cambodia Financial Markets Update",
            "force_model": "fast",
            "max_output_tokens": 7000,
            "reasoning_effort": "medium",
            "verbosity": "high",
        },
    },

    "investment_sector_analysis": {
        "id": "investment_sector_analysis",
        "name": "Investment Sector Analysis",
        "description": "Listed-sector analysis (banking, insurance, real estate)",
        "category": "investment",
        "variables": ["sector"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA {sector} SECTOR INVESTMENT ANALYSIS

Cover:
1. Sector structure and listed companies
2. Growth drivers and earnings outlook
3. Valuation ranges and dividend policies
4. Regulatory environment and sector-specific risks
5. Investment recommendation with entry points""",
        "options": {
            "title": "Cambodia {sector} Investment Analysis",
            "force_model": "primary",
            "max_output_tokens": 8000,
            "reasoning_effort": "high",
            "verbosity": "high",
        },
    },

    "wealth_optimization": {
        "id": "wealth_optimization",
        "name": "Wealth Optimization",
        "description": "Optimization plan for an existing portfolio",
        "category": "investment",
        "variables": ["current_portfolio", "goals", "timeframe"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA INVESTMENT WEALTH OPTIMIZATION

Current Situation:
- Current Portfolio: {current_portfolio}
- Goals: {goals}
- Timeframe: {timeframe}

Cover:
1. Portfolio diagnosis: concentration, risk, return gaps
2. Reallocation plan across Cambodian and regional assets
3. Income optimization and tax efficiency
4. Risk controls and currency hedging
5. Step-by-step implementation schedule""",
        "options": {
            "title": "Cambodia Investment Wealth Optimization",
            "force_model": "primary",
            "max_output_tokens": 8000,
            "reasoning_effort": "high",
            "verbosity": "high",
        },
    },

    # =========================================================================
    # NATURAL RESOURCES
    # =========================================================================
    "resources_gold": {
        "id": "resources_gold",
        "name": "Gold Mining",
        "description": "Gold mining sector intelligence",
        "category": "resources",
        "variables": ["resource_profile"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA GOLD MINING INTELLIGENCE

Reference Data:
{resource_profile}

Cover production, reserves, major operators, artisanal mining, licensing,
environmental compliance (mercury use), investment opportunities and risks.""",
        "options": {"title": "Cambodia Gold Mining Intelligence", "force_model": "fast"},
    },

    "resources_bauxite": {
        "id": "resources_bauxite",
        "name": "Bauxite Development",
        "description": "Bauxite and aluminum value chain analysis",
        "category": "resources",
        "variables": ["resource_profile"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA BAUXITE DEVELOPMENT ANALYSIS

Reference Data:
{resource_profile}

Cover reserves and grade, development stage, infrastructure needs (port, rail,
power), refinery and smelter economics, investment structure, timeline and risks.""",
        "options": {"title": "Cambodia Bauxite Development Analysis", "force_model": "primary"},
    },

    "resources_gemstones": {
        "id": "resources_gemstones",
        "name": "Gemstones Industry",
        "description": "Gemstone mining and processing analysis",
        "category": "resources",
        "variables": ["resource_profile"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA GEMSTONE INDUSTRY ANALYSIS

Reference Data:
{resource_profile}

Cover gemstone types and areas, artisanal production, export channels,
value-added cutting and certification, tourism links, opportunities and risks.""",
        "options": {"title": "Cambodia Gemstone Industry Analysis", "force_model": "fast"},
    },

    "resources_oil_gas": {
        "id": "resources_oil_gas",
        "name": "Oil & Gas Sector",
        "description": "Offshore oil and gas sector analysis",
        "category": "resources",
        "variables": ["resource_profile"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA OIL & GAS SECTOR ANALYSIS

Reference Data:
{resource_profile}

Cover offshore blocks, reserves, production history and delays, operators,
infrastructure and financing needs, regulatory framework, opportunities and risks.""",
        "options": {"title": "Cambodia Oil & Gas Sector Analysis", "force_model": "primary"},
    },

    "resources_forestry": {
        "id": "resources_forestry",
        "name": "Sustainable Forestry",
        "description": "Sustainable forestry and carbon credit analysis",
        "category": "resources",
        "variables": ["resource_profile"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA SUSTAINABLE FORESTRY ANALYSIS

Reference Data:
{resource_profile}

Cover forest cover and species, certification (FSC, PEFC), illegal logging
challenges, carbon credit and eco-tourism opportunities, and ESG investment risks.""",
        "options": {"title": "Cambodia Sustainable Forestry Analysis", "force_model": "primary"},
    },

    "resources_energy": {
        "id": "resources_energy",
        "name": "Energy Resources",
        "description": "Power generation and renewable energy analysis",
        "category": "resources",
        "variables": ["resource_profile"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA ENERGY RESOURCES ANALYSIS

Reference Data:
{resource_profile}

Cover installed capacity by source, hydro and solar potential, grid access,
power purchase agreements, energy transition, investment opportunities and risks.""",
        "options": {"title": "Cambodia Energy Resources Analysis", "force_model": "primary"},
    },

    "resources_portfolio": {
        "id": "resources_portfolio",
        "name": "Natural Resources Portfolio",
        "description": "Cross-resource portfolio analysis",
        "category": "resources",
        "variables": ["resource_profile"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA NATURAL RESOURCES PORTFOLIO

Reference Data:
{resource_profile}

Build an investment portfolio view across mining, energy and forestry:
allocation by resource, development stage and risk, infrastructure dependencies,
sustainability requirements and a phased 10-year investment plan.""",
        "options": {"title": "Cambodia Natural Resources Portfolio", "force_model": "primary"},
    },

    "resources_regional_comparison": {
        "id": "resources_regional_comparison",
        "name": "Regional Resource Comparison",
        "description": "Cambodia vs ASEAN resource competitiveness",
        "category": "resources",
        "variables": ["resource_profile"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """REGIONAL RESOURCE COMPETITIVENESS: CAMBODIA VS ASEAN

Reference Data:
{resource_profile}

Compare Cambodia with Vietnam, Laos, Thailand, Indonesia and Myanmar on
reserves, costs, infrastructure, regulation and investor protection.
Identify where Cambodia holds an advantage.""",
        "options": {"title": "Regional Resource Competitiveness", "force_model": "fast"},
    },

    # =========================================================================
    # MARKET RESEARCH
    # =========================================================================
    "market_analysis": {
        "id": "market_analysis",
        "name": "Market Analysis",
        "description": "Comprehensive lending market analysis",
        "category": "market_research",
        "variables": ["research_scope", "market_size", "growth_rate", "number_of_players", "details"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CAMBODIA MARKET ANALYSIS

Research Scope: {research_scope}
Market Size: {market_size}
Growth Rate: {growth_rate}%
Number of Players: {number_of_players}

Additional Data:
{details}

Cover:
1. Macroeconomic environment and its effect on credit demand
2. Banking and private lending market structure
3. Key sectors and borrower segments
4. Regulatory environment and upcoming reforms
5. Risks, opportunities and strategic recommendations for the fund""",
        "options": {"title": "Cambodia Market Analysis", "force_model": "primary"},
    },

    "competitive_landscape": {
        "id": "competitive_landscape",
        "name": "Competitive Landscape",
        "description": "Competitor mapping and positioning",
        "category": "market_research",
        "variables": ["details"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """COMPETITIVE LANDSCAPE ANALYSIS - CAMBODIA LENDING

Competitor Data:
{details}

Cover:
1. Market structure and concentration
2. Direct and indirect competitors: strengths and market shares
3. Our competitive positioning and differentiators
4. Competitive threats and response strategies
5. Recommended competitive strategy""",
        "options": {"title": "Competitive Landscape Analysis", "force_model": "primary"},
    },

    "sector_opportunities": {
        "id": "sector_opportunities",
        "name": "Sector Opportunities",
        "description": "Sector-level lending opportunity assessment",
        "category": "market_research",
        "variables": ["details"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """SECTOR OPPORTUNITY ASSESSMENT - CAMBODIA

Sector Data:
{details}

Cover:
1. Sector contributions to GDP and growth rates
2. Credit demand by sector and addressable market
3. Sector-specific risks
4. Ranking of lending opportunities
5. Recommended portfolio allocation by sector""",
        "options": {"title": "Sector Opportunity Assessment", "force_model": "primary"},
    },

    "market_forecast": {
        "id": "market_forecast",
        "name": "Market Forecast",
        "description": "Lending market forecast with scenarios",
        "category": "market_research",
        "variables": ["details"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """MARKET FORECAST ANALYSIS - CAMBODIA LENDING

Forecast Inputs:
{details}

Cover:
1. Forecast methodology and key variables
2. Base, optimistic and pessimistic scenarios with probabilities
3. Market trends shaping the next 24 months
4. Strategic implications for the fund
5. Leading indicators to monitor""",
        "options": {"title": "Market Forecast Analysis", "force_model": "primary"},
    },

    "customer_segmentation": {
        "id": "customer_segmentation",
        "name": "Customer Segmentation",
        "description": "Borrower segment analysis and targeting",
        "category": "market_research",
        "variables": ["details"],
        "system_prompt": CAMBODIA_ANALYST,
        "user_template": """CUSTOMER SEGMENTATION ANALYSIS - CAMBODIA LENDING

Segmentation Data:
{details}

Cover:
1. Segment sizes, growth and profitability
2. Credit demand by segment
3. Segment risk profiles
4. Targeting strategy, channels and value proposition
5. Product recommendations per segment""",
        "options": {"title": "Customer Segmentation Analysis", "force_model": "balanced"},
    },

    # =========================================================================
    # BORROWER DUE DILIGENCE
    # =========================================================================
    "dd_comprehensive": {
        "id": "dd_comprehensive",
        "name": "Comprehensive Due Diligence",
        "description": "Full borrower due diligence assessment",
        "category": "due_diligence",
        "variables": [
            "borrower_id", "borrower_name", "borrower_type", "requested_loan_amount",
            "loan_purpose", "relationship_type", "national_id_status", "address_verification",
            "document_authentication", "income_verification", "asset_verification",
            "bank_statement_review", "credit_bureau_report", "criminal_background_check",
            "pep_screening_results", "sanctions_list_check",
        ],
        "system_prompt": CREDIT_OFFICER,
        "user_template": """CAMBODIA LENDING - COMPREHENSIVE BORROWER DUE DILIGENCE

BORROWER PROFILE:
- Borrower ID: {borrower_id}
- Borrower Name: {borrower_name}
- Borrower Type: {borrower_type}
- Requested Loan Amount: {requested_loan_amount}
- Loan Purpose: {loan_purpose}
- Relationship: {relationship_type}

VERIFICATION STATUS:
- National ID: {national_id_status}
- Address: {address_verification}
- Document Authentication: {document_authentication}
- Income: {income_verification}
- Assets: {asset_verification}
- Bank Statements: {bank_statement_review}
- Credit Bureau: {credit_bureau_report}
- Criminal Background: {criminal_background_check}
- PEP Screening: {pep_screening_results}
- Sanctions Check: {sanctions_list_check}

Assess:
1. Identity and document verification
2. Financial capacity and source of funds
3. Credit history and banking relationships
4. Reputation and legal standing
5. AML/KYC compliance under Cambodian law
6. Overall risk rating, red flags and approval conditions""",
        "options": {"title": "Comprehensive Due Diligence Assessment", "force_model": "primary"},
    },

    "dd_aml_kyc": {
        "id": "dd_aml_kyc",
        "name": "AML/KYC Screening",
        "description": "Anti-money-laundering and KYC screening",
        "category": "due_diligence",
        "variables": [
            "borrower_id", "full_legal_name", "nationality", "business_legal_name",
            "ultimate_beneficial_owners", "pep_screening_status", "sanctions_list_results",
            "adverse_media_check", "declared_source_of_funds", "transaction_amount",
            "transaction_type", "geographic_risk_factors",
        ],
        "system_prompt": CREDIT_OFFICER,
        "user_template": """CAMBODIA AML/KYC COMPLIANCE SCREENING

CUSTOMER:
- Borrower ID: {borrower_id}
- Full Legal Name: {full_legal_name}
- Nationality: {nationality}
- Business Legal Name: {business_legal_name}
- Ultimate Beneficial Owners: {ultimate_beneficial_owners}

SCREENING RESULTS:
- PEP Screening: {pep_screening_status}
- Sanctions Lists: {sanctions_list_results}
- Adverse Media: {adverse_media_check}

TRANSACTION PROFILE:
- Declared Source of Funds: {declared_source_of_funds}
- Transaction Amount: {transaction_amount}
- Transaction Type: {transaction_type}
- Geographic Risk Factors: {geographic_risk_factors}

Assess:
1. Screening findings and required escalations
2. Money laundering and terrorist financing risk
3. Enhanced due diligence requirements
4. Regulatory reporting obligations (CAFIU)
5. Ongoing monitoring recommendations""",
        "options": {"title": "AML/KYC Compliance Screening", "force_model": "primary"},
    },

    "dd_business_verification": {
        "id": "dd_business_verification",
        "name": "Business Verification",
        "description": "Business entity legitimacy and operations verification",
        "category": "due_diligence",
        "variables": [
            "business_id", "business_legal_name", "registration_number", "business_type",
            "industry", "business_license_status", "tax_compliance_status",
            "years_in_operation", "employee_count", "business_premises", "management_team",
            "annual_revenue", "banking_relationships",
        ],
        "system_prompt": CREDIT_OFFICER,
        "user_template": """CAMBODIA BUSINESS ENTITY VERIFICATION

BUSINESS:
- Business ID: {business_id}
- Legal Name: {business_legal_name}
- Registration Number: {registration_number}
- Business Type: {business_type}
- Industry: {industry}

LICENSING AND COMPLIANCE:
- Business License: {business_license_status}
- Tax Compliance: {tax_compliance_status}

OPERATIONS:
- Years in Operation: {years_in_operation}
- Employees: {employee_count}
- Premises: {business_premises}
- Management Team: {management_team}

FINANCIALS:
- Annual Revenue: {annual_revenue}
- Banking Relationships: {banking_relationships}

Assess legal standing, operational substance, financial credibility,
ownership transparency, industry risks and required documentation.""",
        "options": {"title": "Business Entity Verification", "force_model": "primary"},
    },

    "dd_red_flags": {
        "id": "dd_red_flags",
        "name": "Red Flag Analysis",
        "description": "Red flag detection, severity and investigation planning",
        "category": "due_diligence",
        "variables": [
            "borrower_id", "borrower_name", "identity_red_flags", "financial_red_flags",
            "business_red_flags", "behavioral_red_flags", "compliance_red_flags",
            "review_trigger",
        ],
        "system_prompt": CREDIT_OFFICER,
        "user_template": """CAMBODIA LENDING - RED FLAG DETECTION AND ANALYSIS

BORROWER:
- Borrower ID: {borrower_id}
- Borrower Name: {borrower_name}
- Review Trigger: {review_trigger}

IDENTIFIED RED FLAGS:
- Identity: {identity_red_flags}
- Financial: {financial_red_flags}
- Business: {business_red_flags}
- Behavioral: {behavioral_red_flags}
- Compliance: {compliance_red_flags}

Assess:
1. Severity and credibility of each red flag
2. Patterns suggesting fraud or money laundering
3. Investigation steps and required resources
4. Mitigation options or decline rationale
5. Regulatory reporting obligations""",
        "options": {"title": "Red Flag Detection and Analysis", "force_model": "primary"},
    },

    # =========================================================================
    # LOAN SERVICING
    # =========================================================================
    "portfolio_monitoring": {
        "id": "portfolio_monitoring",
        "name": "Portfolio Monitoring",
        "description": "Loan portfolio performance monitoring",
        "category": "loan_servicing",
        "variables": [
            "total_active_loans", "total_outstanding", "average_loan_size",
            "current_loans", "current_percentage", "past_due_30", "past_due_60",
            "past_due_90", "default_loans", "default_percentage", "portfolio_yield",
            "charge_offs", "provision_coverage", "collection_rate",
        ],
        "system_prompt": LOAN_SERVICER,
        "user_template": """CAMBODIA PRIVATE LENDING FUND - PORTFOLIO PERFORMANCE MONITORING

PORTFOLIO OVERVIEW:
- Total Active Loans: {total_active_loans}
- Total Outstanding Principal: {total_outstanding}
- Average Loan Size: {average_loan_size}

PAYMENT PERFORMANCE:
- Current Loans: {current_loans} ({current_percentage}%)
- Past Due 1-30 Days: {past_due_30}
- Past Due 31-60 Days: {past_due_60}
- Past Due 61-90 Days: {past_due_90}
- Default/NPL: {default_loans} ({default_percentage}%)

FINANCIAL METRICS:
- Portfolio Yield: {portfolio_yield}%
- Net Charge-Offs (YTD): {charge_offs}
- Provision Coverage: {provision_coverage}%
- Collection Effectiveness: {collection_rate}%

Analyze payment performance, concentration, collection effectiveness,
profitability and forward-looking risk. Benchmark against industry standards
and give actionable recommendations.""",
        "options": {"title": "Portfolio Performance Analysis", "force_model": "primary"},
    },

    "loan_servicing": {
        "id": "loan_servicing",
        "name": "Loan Servicing",
        "description": "Individual loan servicing analysis",
        "category": "loan_servicing",
        "variables": [
            "loan_id", "borrower_name", "original_amount", "outstanding_balance",
            "monthly_payment", "current_status", "days_past_due", "last_payment_date",
            "payment_history", "late_payments_ytd", "total_late_fees", "covenant_violations",
        ],
        "system_prompt": LOAN_SERVICER,
        "user_template": """CAMBODIA LENDING - INDIVIDUAL LOAN SERVICING ANALYSIS

LOAN IDENTIFICATION:
- Loan ID: {loan_id}
- Borrower Name: {borrower_name}
- Original Amount: {original_amount}
- Outstanding Balance: {outstanding_balance}
- Monthly Payment: {monthly_payment}

PAYMENT STATUS:
- Current Status: {current_status}
- Days Past Due: {days_past_due}
- Last Payment Date: {last_payment_date}

ACCOUNT HISTORY:
- Payment History (12 months): {payment_history}
- Late Payments YTD: {late_payments_ytd}
- Total Late Fees: {total_late_fees}
- Covenant Violations: {covenant_violations}

Evaluate payment performance, determine account status and required
servicing actions, recommend borrower communication, review covenant
compliance and assess default risk and recovery prospects.""",
        "options": {"title": "Individual Loan Servicing Analysis", "force_model": "fast"},
    },

    "collection_notice": {
        "id": "collection_notice",
        "name": "Collection Notice",
        "description": "Collection notice drafting",
        "category": "loan_servicing",
        "variables": [
            "loan_id", "notice_type", "borrower_name", "outstanding_balance",
            "days_past_due", "past_due_amount", "due_date",
        ],
        "system_prompt": LOAN_SERVICER,
        "user_template": """CAMBODIA LENDING - COLLECTION NOTICE GENERATION

NOTICE TYPE: {notice_type}

LOAN DETAILS:
- Loan ID: {loan_id}
- Borrower: {borrower_name}
- Outstanding Balance: {outstanding_balance}
- Days Past Due: {days_past_due}
- Past Due Amount: {past_due_amount}
- Payment Due By: {due_date}

Draft a professional {notice_type} in English with a Khmer summary line.
State the amount due, payment methods, deadline, consequences of non-payment
under Cambodian law and contact details. Match the tone to the notice type.""",
        "options": {"title": "Collection Notice Generation", "force_model": "fast"},
    },

    "payment_arrangement": {
        "id": "payment_arrangement",
        "name": "Payment Arrangement",
        "description": "Payment arrangement (workout) evaluation",
        "category": "loan_servicing",
        "variables": [
            "loan_id", "borrower_name", "current_balance", "past_due_amount",
            "original_payment", "arrangement_type", "new_payment_amount",
            "payment_frequency", "duration", "monthly_income", "monthly_expenses",
            "hardship_reason",
        ],
        "system_prompt": LOAN_SERVICER,
        "user_template": """CAMBODIA LENDING - PAYMENT ARRANGEMENT ANALYSIS

LOAN:
- Loan ID: {loan_id}
- Borrower: {borrower_name}
- Current Balance: {current_balance}
- Past Due Amount: {past_due_amount}
- Original Payment: {original_payment}

PROPOSED ARRANGEMENT:
- Type: {arrangement_type}
- New Payment: {new_payment_amount}
- Frequency: {payment_frequency}
- Duration: {duration} months

BORROWER FINANCES:
- Monthly Income: {monthly_income}
- Monthly Expenses: {monthly_expenses}
- Hardship Reason: {hardship_reason}

Evaluate affordability, re-default risk, financial impact on the fund,
recovery alternatives, required documentation and monitoring terms.
Recommend approve, approve with conditions, or decline.""",
        "options": {"title": "Payment Arrangement Analysis", "force_model": "primary"},
    },
}

# Custom prompts (runtime modifications, kept in memory)
_custom_prompts: Dict[str, Dict[str, Any]] = {}


def get_all_prompts() -> Dict[str, Dict[str, Any]]:
    """
    Get all prompts (custom overrides + defaults).

    Returns:
        Dict with prompt_id -> prompt config
    """
    result = {}

    for prompt_id, default_config in DEFAULT_PROMPTS.items():
        result[prompt_id] = {**default_config, "is_custom": False, "source": "default"}

    for prompt_id, custom_config in _custom_prompts.items():
        result[prompt_id].update(custom_config)
        result[prompt_id]["is_custom"] = True
        result[prompt_id]["source"] = "custom"

    return result


def get_prompt(prompt_id: str) -> Optional[Dict[str, Any]]:
    """
    Get a specific prompt by ID.

    Args:
        prompt_id: The prompt identifier

    Returns:
        Prompt config dict or None if not found
    """
    if prompt_id in _custom_prompts:
        return {**DEFAULT_PROMPTS[prompt_id], **_custom_prompts[prompt_id], "is_custom": True}
    elif prompt_id in DEFAULT_PROMPTS:
        return {**DEFAULT_PROMPTS[prompt_id], "is_custom": False}
    return None


def get_prompt_text(prompt_id: str, **variables) -> tuple[str, str]:
    """
    Get formatted prompt text ready for LLM.

    Args:
        prompt_id: The prompt identifier
        **variables: Variables to substitute in template

    Returns:
        Tuple of (system_prompt, user_prompt)
    """
    prompt = get_prompt(prompt_id)
    if not prompt:
        raise ValueError(f"Unknown prompt: {prompt_id}")

    system_prompt = prompt["system_prompt"]
    user_prompt = prompt["user_template"].format(**variables)

    return system_prompt, user_prompt


def build_prompt(prompt_id: str, **variables) -> str:
    """System and user text joined into the single prompt the executor takes."""
    system_prompt, user_prompt = get_prompt_text(prompt_id, **variables)
    return f"{system_prompt}\n\n{user_prompt}"


def get_execution_options(prompt_id: str, **variables) -> Dict[str, Any]:
    """
    Execution options for a prompt, with the title formatted.

    Args:
        prompt_id: The prompt identifier
        **variables: Values for {placeholders} in the title

    Returns:
        Dict of title, force_model, max_output_tokens, reasoning_effort, verbosity
    """
    prompt = get_prompt(prompt_id)
    if not prompt:
        raise ValueError(f"Unknown prompt: {prompt_id}")

    options = dict(prompt.get("options") or {})
    if options.get("title"):
        options["title"] = options["title"].format(**variables)
    return options


def update_prompt(prompt_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update a prompt with custom values.

    Args:
        prompt_id: The prompt identifier
        updates: Dict with fields to update (system_prompt, user_template, etc.)

    Returns:
        Updated prompt config
    """
    if prompt_id not in DEFAULT_PROMPTS:
        raise ValueError(f"Unknown prompt: {prompt_id}")

    if prompt_id not in _custom_prompts:
        _custom_prompts[prompt_id] = {}

    _custom_prompts[prompt_id].update(updates)
    _custom_prompts[prompt_id]["updated_at"] = datetime.utcnow().isoformat()
    logger.info(f"Prompt '{prompt_id}' updated: {', '.join(updates)}")

    return get_prompt(prompt_id)


def reset_prompt(prompt_id: str) -> Optional[Dict[str, Any]]:
    """
    Reset a prompt to its default values.

    Args:
        prompt_id: The prompt identifier

    Returns:
        Default prompt config
    """
    _custom_prompts.pop(prompt_id, None)
    return get_prompt(prompt_id)


def reset_all_prompts() -> Dict[str, Dict[str, Any]]:
    """
    Reset all prompts to defaults.

    Returns:
        All default prompts
    """
    _custom_prompts.clear()
    return get_all_prompts()


def get_prompt_categories() -> Dict[str, list]:
    """
    Get prompts organized by category.

    Returns:
        Dict with category -> list of prompt configs
    """
    prompts = get_all_prompts()
    categories = {}

    for prompt_id, config in prompts.items():
        category = config.get("category", "other")
        if category not in categories:
            categories[category] = []
        categories[category].append(config)

    return categories
