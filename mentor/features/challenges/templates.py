from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List

DIFFICULTIES: List[str] = ["beginner", "intermediate", "advanced"]
CATEGORIES: List[str] = ["react", "javascript", "css", "typescript", "nextjs", "node", "general"]


CHALLENGE_PROMPTS: Dict[str, Dict[str, str]] = {
    "beginner": {
        "react": "Create a simple React component challenge suitable for beginners. Focus on basic props, state, and event handling.",
        "javascript": "Create a JavaScript challenge for beginners focusing on fundamental concepts like variables, functions, and basic DOM manipulation.",
        "css": "Create a CSS challenge for beginners focusing on layout, flexbox, or basic styling techniques.",
        "typescript": "Create a TypeScript challenge for beginners focusing on basic types, interfaces, and type safety.",
        "nextjs": "Create a Next.js challenge for beginners focusing on routing, components, or basic API routes.",
        "node": "Create a Node.js challenge for beginners focusing on basic server concepts, file operations, or simple APIs.",
        "general": "Create a general frontend challenge suitable for beginners covering HTML, CSS, and JavaScript fundamentals.",
    },
    "intermediate": {
        "react": "Create a React challenge for intermediate developers involving hooks, context, or component composition.",
        "javascript": "Create a JavaScript challenge for intermediate developers involving async/await, array methods, or ES6+ features.",
        "css": "Create a CSS challenge for intermediate developers involving animations, grid, or responsive design.",
        "typescript": "Create a TypeScript challenge for intermediate developers involving generics, utility types, or advanced type patterns.",
        "nextjs": "Create a Next.js challenge for intermediate developers involving SSR, SSG, or API integration.",
        "node": "Create a Node.js challenge for intermediate developers involving Express, middleware, or database integration.",
        "general": "Create a general frontend challenge for intermediate developers involving modern development practices and tools.",
    },
    "advanced": {
        "react": "Create an advanced React challenge involving performance optimization, custom hooks, or complex state management.",
        "javascript": "Create an advanced JavaScript challenge involving design patterns, advanced async patterns, or optimization techniques.",
        "css": "Create an advanced CSS challenge involving complex animations, custom properties, or advanced layout techniques.",
        "typescript": "Create an advanced TypeScript challenge involving conditional types, mapped types, or complex type inference.",
        "nextjs": "Create an advanced Next.js challenge involving optimization, middleware, or complex data fetching patterns.",
        "node": "Create an advanced Node.js challenge involving microservices, performance optimization, or advanced architecture patterns.",
        "general": "Create an advanced frontend challenge involving architecture, performance, or advanced development practices.",
    },
}


def _c(title: str, description: str, requirements: List[str], hints: List[str], technologies: List[str], minutes: int) -> Dict[str, Any]:
    return {
        "title": title,
        "description": description,
        "requirements": requirements,
        "hints": hints,
        "technologies": technologies,
        "estimated_time": minutes,
        "example_code": None,
    }


FALLBACK_CHALLENGES: Dict[str, Dict[str, Dict[str, Any]]] = {
    "beginner": {
        "react": _c(
            "Interactive Counter Component",
            "Build a React counter component with increment, decrement, and reset functionality. Add some styling to make it look professional.",
            [
                "Use useState hook for state management",
                "Include increment, decrement, and reset buttons",
                "Display the current count prominently",
                "Add basic styling with CSS or styled-components",
            ],
            [
                "Remember to use useState to manage the counter state",
                "You can use onClick events to handle button clicks",
                "Consider adding disabled states for better UX",
            ],
            ["React", "JavaScript", "CSS"],
            30,
        ),
        "javascript": _c(
            "Simple Calculator",
            "Create a basic calculator that can perform addition, subtraction, multiplication, and division operations.",
            [
                "Create functions for basic math operations",
                "Handle user input validation",
                "Display results clearly",
                "Add error handling for division by zero",
            ],
            [
                "Use parseFloat() to convert strings to numbers",
                "Consider using switch statements for operations",
                "Remember to validate input before calculations",
            ],
            ["JavaScript", "HTML", "CSS"],
            45,
        ),
        "css": _c(
            "Responsive Card Layout",
            "Design a responsive card layout that works on mobile and desktop using flexbox or CSS Grid.",
            [
                "Create at least 3 cards with image, title, and description",
                "Use flexbox or CSS Grid for layout",
                "Make it responsive for mobile devices",
                "Add hover effects on cards",
            ],
            [
                "Use media queries for responsive design",
                "Consider using gap property for spacing",
                "Transform and transition properties for hover effects",
            ],
            ["CSS", "HTML"],
            40,
        ),
        "typescript": _c(
            "Basic Type Safety",
            "Convert a JavaScript function to TypeScript with proper type annotations and interface definitions.",
            [
                "Define interfaces for data structures",
                "Add type annotations to function parameters",
                "Use proper return types",
                "Handle optional properties",
            ],
            [
                "Use interfaces for object types",
                "Optional properties use the ? symbol",
                "Array types can be defined as Type[] or Array<Type>",
            ],
            ["TypeScript", "JavaScript"],
            35,
        ),
        "nextjs": _c(
            "Simple Blog Page",
            "Create a basic blog page with static content using Next.js pages and components.",
            [
                "Create a blog post list page",
                "Create individual blog post pages",
                "Use Next.js Link component for navigation",
                "Add basic styling",
            ],
            [
                "Use the pages directory for routing",
                "Link component from next/link for navigation",
                "Consider using getStaticProps for static content",
            ],
            ["Next.js", "React", "CSS"],
            50,
        ),
        "node": _c(
            "Simple REST API",
            "Create a basic REST API with Express.js that handles GET and POST requests for a simple resource.",
            [
                "Set up an Express.js server",
                "Create GET and POST endpoints",
                "Handle JSON request/response",
                "Add basic error handling",
            ],
            [
                "Use express.json() middleware for parsing JSON",
                "HTTP status codes: 200 for success, 400 for errors",
                "Test your API with tools like Postman",
            ],
            ["Node.js", "Express.js", "JavaScript"],
            45,
        ),
        "general": _c(
            "Interactive Landing Page",
            "Build a responsive landing page with interactive elements using HTML, CSS, and JavaScript.",
            [
                "Create a hero section with call-to-action",
                "Add a responsive navigation menu",
                "Include interactive elements (forms, buttons)",
                "Make it mobile-friendly",
            ],
            [
                "Use semantic HTML elements",
                "CSS Grid and Flexbox for layout",
                "Add event listeners for interactions",
            ],
            ["HTML", "CSS", "JavaScript"],
            60,
        ),
    },
    "intermediate": {
        "react": _c(
            "Todo List with Local Storage",
            "Create a todo list application that persists data in localStorage. Include features like adding, editing, deleting, and filtering todos.",
            [
                "Add, edit, and delete todos functionality",
                "Mark todos as complete/incomplete",
                "Filter todos by status (all, active, completed)",
                "Persist data using localStorage",
                "Responsive design",
            ],
            [
                "Use useEffect to load data from localStorage on mount",
                "Consider using a useReducer for complex state management",
                "Remember to handle edge cases like empty states",
            ],
            ["React", "JavaScript", "CSS", "localStorage"],
            90,
        ),
        "javascript": _c(
            "Weather App with API",
            "Build a weather application that fetches data from a weather API and displays current conditions and forecasts.",
            [
                "Fetch data from a weather API",
                "Display current weather conditions",
                "Show 5-day forecast",
                "Handle loading states and errors",
                "Add search functionality for cities",
            ],
            [
                "Use async/await for API calls",
                "Handle API errors gracefully",
                "Consider using a weather service like OpenWeatherMap",
            ],
            ["JavaScript", "API", "HTML", "CSS"],
            120,
        ),
        "css": _c(
            "Advanced Animation Gallery",
            "Create an image gallery with advanced CSS animations and hover effects.",
            [
                "Create a grid-based image gallery",
                "Add smooth transitions and animations",
                "Implement hover effects with transforms",
                "Add a lightbox or modal for full-size images",
            ],
            [
                "Use CSS transforms for smooth animations",
                "Transition property for hover effects",
                "Consider using CSS Grid for the layout",
            ],
            ["CSS", "HTML", "JavaScript"],
            80,
        ),
        "typescript": _c(
            "Generic Data Fetcher",
            "Create a generic data fetching utility with TypeScript that can work with different API endpoints and data types.",
            [
                "Use TypeScript generics for type safety",
                "Handle different HTTP methods (GET, POST, PUT, DELETE)",
                "Implement proper error handling",
                "Add retry logic for failed requests",
            ],
            [
                "Use generic types <T> for flexible typing",
                "async/await for handling promises",
                "Consider using union types for different response types",
            ],
            ["TypeScript", "JavaScript", "API"],
            100,
        ),
        "nextjs": _c(
            "Dynamic Blog with API Routes",
            "Build a blog application with dynamic pages and API routes for managing blog posts.",
            [
                "Create dynamic blog post pages",
                "Implement API routes for CRUD operations",
                "Add a simple admin interface",
                "Use getServerSideProps or getStaticProps",
            ],
            [
                "Use [slug].js for dynamic routing",
                "API routes go in pages/api directory",
                "Consider using a headless CMS or JSON files",
            ],
            ["Next.js", "React", "API Routes", "CSS"],
            140,
        ),
        "node": _c(
            "User Authentication System",
            "Build a complete user authentication system with registration, login, and protected routes.",
            [
                "User registration and login endpoints",
                "Password hashing with bcrypt",
                "JWT token authentication",
                "Protected route middleware",
                "Email validation",
            ],
            [
                "Use bcrypt for password hashing",
                "JWT tokens for session management",
                "Middleware for route protection",
            ],
            ["Node.js", "Express.js", "JWT", "bcrypt"],
            160,
        ),
        "general": _c(
            "Progressive Web App",
            "Convert a regular web application into a Progressive Web App (PWA) with offline functionality.",
            [
                "Add a service worker for caching",
                "Create a web app manifest",
                "Implement offline functionality",
                "Add install prompt",
            ],
            [
                "Service workers handle background tasks",
                "Cache API for offline storage",
                "Web app manifest for installability",
            ],
            ["JavaScript", "Service Worker", "PWA", "HTML", "CSS"],
            130,
        ),
    },
    "advanced": {
        "react": _c(
            "Real-time Chat Interface",
            "Build a real-time chat interface with message history, typing indicators, and user presence. Focus on performance and user experience.",
            [
                "Real-time message sending and receiving",
                "Message history with pagination",
                "Typing indicators",
                "User online/offline status",
                "Optimistic updates for better UX",
            ],
            [
                "Consider using WebSockets or a real-time service",
                "Implement virtual scrolling for large message lists",
                "Use React.memo and useMemo for performance optimization",
            ],
            ["React", "TypeScript", "WebSocket", "CSS"],
            180,
        ),
        "javascript": _c(
            "Custom Framework Implementation",
            "Build a mini JavaScript framework with virtual DOM, component system, and state management.",
            [
                "Implement a virtual DOM system",
                "Create a component-based architecture",
                "Add state management capabilities",
                "Implement efficient diffing algorithm",
            ],
            [
                "Virtual DOM is just JavaScript objects representing DOM",
                "Diffing algorithm compares old and new virtual DOM trees",
                "Use proxies for reactive state management",
            ],
            ["JavaScript", "Virtual DOM", "Architecture"],
            240,
        ),
        "css": _c(
            "3D CSS Animation Scene",
            "Create a complex 3D scene using only CSS with multiple animated elements and camera movements.",
            [
                "Use CSS 3D transforms extensively",
                "Create multiple animated 3D objects",
                "Implement camera-like movements",
                "Add lighting effects with CSS",
            ],
            [
                "transform-style: preserve-3d is crucial",
                "Use perspective for 3D depth",
                "Keyframes for complex animations",
            ],
            ["CSS", "3D Transforms", "Animations"],
            200,
        ),
        "typescript": _c(
            "Advanced Type System",
            "Create a complex type system with conditional types, mapped types, and template literal types.",
            [
                "Use conditional types for type inference",
                "Implement mapped types for transformations",
                "Create template literal types",
                "Build a type-safe API client",
            ],
            [
                "Conditional types use extends keyword",
                "Mapped types iterate over object properties",
                "Template literal types for string manipulation",
            ],
            ["TypeScript", "Advanced Types", "Type System"],
            160,
        ),
        "nextjs": _c(
            "Full-Stack E-commerce Platform",
            "Build a complete e-commerce platform with payment integration, inventory management, and admin dashboard.",
            [
                "Product catalog with search and filtering",
                "Shopping cart and checkout process",
                "Payment integration (Stripe/PayPal)",
                "Admin dashboard for inventory",
                "User authentication and orders",
            ],
            [
                "Use Next.js API routes for backend",
                "Implement proper state management",
                "Consider using a database like MongoDB",
            ],
            ["Next.js", "React", "API Routes", "Database", "Payment"],
            300,
        ),
        "node": _c(
            "Microservices Architecture",
            "Design and implement a microservices architecture with API gateway, service discovery, and distributed logging.",
            [
                "Create multiple independent services",
                "Implement API gateway for routing",
                "Add service discovery mechanism",
                "Set up distributed logging",
                "Handle inter-service communication",
            ],
            [
                "Use containers for service isolation",
                "Event-driven architecture for communication",
                "Circuit breaker pattern for resilience",
            ],
            ["Node.js", "Microservices", "Docker", "Architecture"],
            280,
        ),
        "general": _c(
            "Performance Optimization Suite",
            "Create a comprehensive performance optimization suite for web applications with monitoring and analysis tools.",
            [
                "Implement performance monitoring",
                "Create automated optimization recommendations",
                "Add bundle analysis and optimization",
                "Build real-time performance dashboard",
            ],
            [
                "Use Performance API for measurements",
                "Lighthouse for performance audits",
                "Webpack Bundle Analyzer for bundle optimization",
            ],
            ["JavaScript", "Performance", "Monitoring", "Optimization"],
            220,
        ),
    },
}


def get_fallback_challenge(difficulty: str, category: str) -> Dict[str, Any]:
    """Deterministic challenge for a (difficulty, category) cell.

    Unknown keys resolve to the beginner/react cell; callers validate first.
    """
    cell = FALLBACK_CHALLENGES.get(difficulty, {}).get(category) or FALLBACK_CHALLENGES["beginner"]["react"]
    payload = deepcopy(cell)
    payload.update({"difficulty": difficulty, "category": category, "is_active": True})
    return payload


__all__ = [
    "CATEGORIES",
    "CHALLENGE_PROMPTS",
    "DIFFICULTIES",
    "FALLBACK_CHALLENGES",
    "get_fallback_challenge",
]
